from bpmnhub.config.settings import Settings
from bpmnhub.database.models import GenerationResultRecord
from bpmnhub.database.repositories.generation_result_repository import (
    GenerationResultRepository,
)
from bpmnhub.logging.logger import Log
from bpmnhub.worker.processor import ResultProcessor


class ResultRunner:
    """Deliver one generation result, catch exceptions, and apply retry logic."""

    def __init__(
        self,
        processor: ResultProcessor,
        result_repo: GenerationResultRepository,
        settings: Settings,
    ) -> None:
        self._processor = processor
        self._result_repo = result_repo
        self._settings = settings

    def run(self, record: GenerationResultRecord) -> None:
        Log.info(
            f"Delivering generation result {record.id} (attempt {record.attempts + 1})",
            project_id=record.project_id,
            outcome=record.outcome,
        )
        try:
            context = self._processor.process(record)
        except Exception as exc:
            self._handle_failure(record, exc)
            return

        if context.applied:
            self._result_repo.mark_applied(record.id)
        else:
            self._result_repo.mark_discarded(record.id)
            Log.warning(f"Generation result {record.id} discarded", project_id=record.project_id)

    def _handle_failure(self, record: GenerationResultRecord, exc: Exception) -> None:
        """Increment attempts; mark failed if at max, otherwise back to pending."""
        if record.attempts + 1 >= self._settings.max_result_attempts:
            self._result_repo.mark_failed(record.id, str(exc))
            Log.error(
                f"Generation result {record.id} failed after {record.attempts + 1} attempts",
                error=exc,
            )
        else:
            self._result_repo.increment_attempts(record.id)
            Log.warning(f"Generation result {record.id} will be retried", error=exc)
