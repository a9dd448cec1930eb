import time

from bpmnhub.config.settings import Settings
from bpmnhub.database.connection import get_connection
from bpmnhub.database.models import GenerationResultRecord
from bpmnhub.database.repositories.generation_result_repository import (
    GenerationResultRepository,
)
from bpmnhub.logging.logger import Log
from bpmnhub.worker.result_runner import ResultRunner


class Worker:
    """Poll loop: claim a generation result -> deliver it -> sleep when idle."""

    def __init__(
        self,
        result_repo: GenerationResultRepository,
        runner: ResultRunner,
        settings: Settings,
    ) -> None:
        self._result_repo = result_repo
        self._runner = runner
        self._settings = settings

    def run(self, max_results: int | None = None) -> None:
        """Main poll loop. Runs until interrupted or ``max_results`` were delivered."""
        Log.info("Result worker started")
        delivered = 0
        try:
            while max_results is None or delivered < max_results:
                record = self._try_claim()
                if record is None:
                    Log.debug("No generation results pending, sleeping")
                    time.sleep(self._settings.result_poll_interval_seconds)
                    continue
                self._runner.run(record)
                delivered += 1
        except KeyboardInterrupt:
            Log.info("Result worker shutting down")

    def _try_claim(self) -> GenerationResultRecord | None:
        """Claim the next pending result; database errors are logged and retried."""
        try:
            with get_connection() as conn:
                return self._result_repo.claim_next_result(conn)
        except Exception as exc:
            Log.warning(f"Database error while claiming result, will retry: {exc}")
            return None
