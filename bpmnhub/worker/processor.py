from bpmnhub.config.settings import Settings
from bpmnhub.database.models import GenerationResultRecord
from bpmnhub.database.repositories.generation_result_repository import (
    GenerationResultRepository,
)
from bpmnhub.database.repositories.project_repository import ProjectRepository
from bpmnhub.intake.registry import DocumentRegistry
from bpmnhub.worker.pipeline import PipelineStep, ResultContext
from bpmnhub.worker.steps import ApplyResultStep, LoadProjectStep, RecordErrorStep
from bpmnhub.workflow.workflow import ProjectWorkflow


class ResultProcessor:
    """Runs the delivery steps for one generation result.

    If a step raises, ``failed_step`` records the error and the exception is
    re-raised for the runner's retry logic.
    """

    def __init__(self, steps: list[PipelineStep], failed_step: PipelineStep) -> None:
        self._steps = steps
        self._failed_step = failed_step

    def process(self, record: GenerationResultRecord) -> ResultContext:
        context = ResultContext(record=record)
        try:
            for step in self._steps:
                context = step.run(context)
        except Exception as exc:
            context.error_message = str(exc)
            self._failed_step.run(context)
            raise
        return context


def build_processor(
    settings: Settings,
    result_repo: GenerationResultRepository | None = None,
) -> ResultProcessor:
    """Build a ResultProcessor wired to the PostgreSQL repositories."""
    store = ProjectRepository()
    workflow = ProjectWorkflow(DocumentRegistry(), store)
    repo = result_repo or GenerationResultRepository(settings.max_result_attempts)
    return ResultProcessor(
        steps=[LoadProjectStep(store), ApplyResultStep(workflow)],
        failed_step=RecordErrorStep(repo),
    )
