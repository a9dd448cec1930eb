from bpmnhub.database.base import BaseProjectStore
from bpmnhub.database.repositories.generation_result_repository import (
    GenerationResultRepository,
)
from bpmnhub.diagram.models import DiagramKind
from bpmnhub.logging.logger import Log
from bpmnhub.worker.exceptions import UnknownOutcomeError
from bpmnhub.worker.pipeline import PipelineStep, ResultContext
from bpmnhub.workflow.workflow import ProjectWorkflow


class LoadProjectStep(PipelineStep):
    def __init__(self, store: BaseProjectStore) -> None:
        self._store = store

    def run(self, context: ResultContext) -> ResultContext:
        context.project = self._store.find_by_id(context.record.project_id)
        Log.info(
            "Loaded project for generation result",
            project_id=context.project.id,
            result_id=context.record.id,
            status=context.project.status.value,
        )
        return context


class ApplyResultStep(PipelineStep):
    def __init__(self, workflow: ProjectWorkflow) -> None:
        self._workflow = workflow

    def run(self, context: ResultContext) -> ResultContext:
        if context.project is None:
            raise ValueError("ResultContext.project must be set before applying a result")
        record = context.record
        if record.outcome == "success":
            context.transition = self._workflow.on_generation_success(
                context.project,
                record.payload,
                kind=DiagramKind(record.kind),
                cycle=record.cycle,
            )
        elif record.outcome == "failure":
            context.transition = self._workflow.on_generation_failure(
                context.project,
                record.payload,
                cycle=record.cycle,
            )
        else:
            raise UnknownOutcomeError(
                f"Generation result {record.id} has unknown outcome '{record.outcome}'"
            )
        return context


class RecordErrorStep(PipelineStep):
    def __init__(self, result_repo: GenerationResultRepository) -> None:
        self._result_repo = result_repo

    def run(self, context: ResultContext) -> ResultContext:
        self._result_repo.record_error(context.record.id, context.error_message)
        Log.error(
            f"Delivery of generation result failed: {context.error_message}",
            result_id=context.record.id,
        )
        return context
