"""Project state machine: draft -> processing -> ready | error.

Caller triggers (submit, retry, submit_revision) raise when used from the
wrong status. A result of the external generation workflow that does not
belong to the current processing cycle is logged and discarded, never raised,
so at most one result is applied per cycle. A transition the store fails to
persist is undone on the in-memory project before the storage error propagates.
"""

from collections.abc import Callable, Iterable

from bpmnhub.database.base import BaseProjectStore
from bpmnhub.diagram.exceptions import StructuralInvalidError
from bpmnhub.diagram.models import DiagramKind
from bpmnhub.intake import gate
from bpmnhub.intake.exceptions import IntakeIncompleteError
from bpmnhub.intake.models import UploadedDocument
from bpmnhub.intake.registry import DocumentRegistry
from bpmnhub.logging.logger import Log
from bpmnhub.workflow.artifacts import ArtifactRecorder
from bpmnhub.workflow.exceptions import InvalidTransitionError
from bpmnhub.workflow.models import Project, ProjectStatus, TransitionResult

TransitionObserver = Callable[[Project, TransitionResult], None]


class ProjectWorkflow:
    """Applies transitions to projects and notifies observers."""

    def __init__(
        self,
        registry: DocumentRegistry,
        store: BaseProjectStore,
        recorder: ArtifactRecorder | None = None,
    ) -> None:
        self._registry = registry
        self._store = store
        self._recorder = recorder or ArtifactRecorder(store)
        self._observers: list[TransitionObserver] = []

    def subscribe(self, observer: TransitionObserver) -> None:
        self._observers.append(observer)

    def unsubscribe(self, observer: TransitionObserver) -> None:
        self._observers.remove(observer)

    def submit(
        self, project: Project, uploads: Iterable[UploadedDocument]
    ) -> TransitionResult:
        """Send a draft project to generation.

        Raises:
            InvalidTransitionError: if the project is not a draft.
            IntakeIncompleteError: if required documents are not ready.
        """
        self._require(project, ProjectStatus.DRAFT, "submit")
        self._require_intake(list(uploads))
        return self._commit(project, ProjectStatus.PROCESSING, new_cycle=True)

    def retry(
        self, project: Project, uploads: Iterable[UploadedDocument]
    ) -> TransitionResult:
        """Restart generation for a failed project with resupplied documents.

        The ready documents replace the project's generation input before the
        new cycle starts.

        Raises:
            InvalidTransitionError: if the project is not in error.
            IntakeIncompleteError: if required documents are not ready.
        """
        self._require(project, ProjectStatus.ERROR, "retry")
        uploads = list(uploads)
        self._require_intake(uploads)
        ready_documents = [u for u in uploads if u.is_ready]
        self._store.replace_inputs(project.id, ready_documents)
        Log.info(
            "Generation input replaced",
            project_id=project.id,
            documents=len(ready_documents),
        )
        return self._commit(project, ProjectStatus.PROCESSING, new_cycle=True)

    def submit_revision(self, project: Project) -> TransitionResult:
        """Regenerate a ready project.

        Raises:
            InvalidTransitionError: if the project is not ready.
        """
        self._require(project, ProjectStatus.READY, "submit a revision of")
        return self._commit(project, ProjectStatus.PROCESSING, new_cycle=True)

    def on_generation_success(
        self,
        project: Project,
        xml: str,
        kind: DiagramKind = DiagramKind.AS_IS,
        cycle: int | None = None,
    ) -> TransitionResult:
        """Apply a successful generation result.

        The generated diagram is recorded as a new revision when it is valid;
        otherwise the project moves to error with the missing elements as reason.
        A diagram already recorded for the current cycle by an earlier, partly
        failed delivery is reused instead of being recorded again.
        """
        if not self._accepts(project, "success", cycle):
            return TransitionResult(status=project.status, applied=False)

        if kind is DiagramKind.TO_BE and not project.has_as_is:
            return self._fail(project, "Generated To-Be diagram has no As-Is baseline")
        recorded = project.generated(kind, project.cycle)
        if recorded is None:
            try:
                self._recorder.record(project, xml, kind, cycle=project.cycle)
            except StructuralInvalidError as exc:
                return self._fail(project, f"Generated diagram is invalid: {exc}")
        else:
            Log.info(
                "Generated diagram already recorded for this cycle",
                project_id=project.id,
                kind=kind.value,
                revision=recorded.revision,
            )
        return self._commit(project, ProjectStatus.READY)

    def on_generation_failure(
        self, project: Project, reason: str, cycle: int | None = None
    ) -> TransitionResult:
        """Apply a failed generation result."""
        if not self._accepts(project, "failure", cycle):
            return TransitionResult(status=project.status, applied=False)
        return self._fail(project, reason or "Generation failed")

    def _fail(self, project: Project, reason: str) -> TransitionResult:
        return self._commit(project, ProjectStatus.ERROR, error=reason)

    def _commit(
        self,
        project: Project,
        status: ProjectStatus,
        error: str | None = None,
        new_cycle: bool = False,
    ) -> TransitionResult:
        """Apply ``status`` to the project and persist it.

        If storage rejects the update the project is restored to its previous
        state and the error propagates.
        """
        previous = (project.status, project.cycle, project.last_error, project.updated_at)
        project.status = status
        project.last_error = error
        if new_cycle:
            project.cycle += 1
        project.touch()
        try:
            self._store.update_project(project)
        except Exception:
            project.status, project.cycle, project.last_error, project.updated_at = previous
            Log.warning(
                "Project transition not persisted, state restored",
                project_id=project.id,
                status=project.status.value,
            )
            raise

        result = TransitionResult(status=status, error=error)
        Log.info(
            "Project transitioned",
            project_id=project.id,
            status=status.value,
            cycle=project.cycle,
        )
        for observer in list(self._observers):
            try:
                observer(project, result)
            except Exception:
                Log.exception("Transition observer failed", project_id=project.id)
        return result

    def _accepts(self, project: Project, outcome: str, cycle: int | None) -> bool:
        if project.status is not ProjectStatus.PROCESSING:
            Log.warning(
                "Discarding generation result for project not in processing",
                project_id=project.id,
                outcome=outcome,
                status=project.status.value,
            )
            return False
        if cycle is not None and cycle != project.cycle:
            Log.warning(
                "Discarding generation result from another cycle",
                project_id=project.id,
                outcome=outcome,
                result_cycle=cycle,
                current_cycle=project.cycle,
            )
            return False
        return True

    def _require(self, project: Project, expected: ProjectStatus, trigger: str) -> None:
        if project.status is not expected:
            raise InvalidTransitionError(trigger, project.status)

    def _require_intake(self, uploads: Iterable[UploadedDocument]) -> None:
        missing = gate.missing(self._registry.requirements(), uploads)
        if missing:
            raise IntakeIncompleteError(missing)
