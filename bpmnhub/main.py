from bpmnhub.config.settings import Settings
from bpmnhub.database.connection import close_pool, init_pool
from bpmnhub.database.repositories.generation_result_repository import (
    GenerationResultRepository,
)
from bpmnhub.logging.logger import Log
from bpmnhub.worker.processor import build_processor
from bpmnhub.worker.result_runner import ResultRunner
from bpmnhub.worker.worker import Worker


def main() -> None:
    """Entry point: initialize pool -> build dependencies -> deliver generation results."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        result_repo = GenerationResultRepository(settings.max_result_attempts)
        processor = build_processor(settings, result_repo)
        runner = ResultRunner(processor, result_repo, settings)
        Worker(result_repo, runner, settings).run()
    finally:
        close_pool()


if __name__ == "__main__":
    main()
