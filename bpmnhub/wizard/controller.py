from enum import IntEnum

from bpmnhub.config.settings import Settings
from bpmnhub.database.base import BaseProjectStore
from bpmnhub.intake import gate
from bpmnhub.intake.exceptions import IntakeIncompleteError
from bpmnhub.intake.models import UploadedDocument
from bpmnhub.intake.registry import DocumentRegistry
from bpmnhub.intake.tracker import UploadTracker, build_upload_tracker
from bpmnhub.logging.logger import Log
from bpmnhub.wizard.exceptions import IncompleteDetailsError, WizardError
from bpmnhub.wizard.rules import DETAILS_RULES, failing_fields
from bpmnhub.workflow.models import Project, ProjectFields, ProjectStatus, ProjectTemplate
from bpmnhub.workflow.workflow import ProjectWorkflow


class WizardStep(IntEnum):
    DETAILS = 1
    DOCUMENT_UPLOAD = 2
    REVIEW = 3


_DETAIL_FIELDS = ("name", "client_alias", "description", "template")


class WizardController:
    """Drives the three-step project creation flow for one user session.

    Advancing re-checks the current step; going back never does, so nothing
    entered on a later step is lost.
    """

    def __init__(
        self,
        registry: DocumentRegistry,
        tracker: UploadTracker,
        store: BaseProjectStore,
        workflow: ProjectWorkflow,
        created_by: str,
        upload_timeout_seconds: float | None = None,
    ) -> None:
        self._registry = registry
        self._tracker = tracker
        self._store = store
        self._workflow = workflow
        self._created_by = created_by
        self._upload_timeout_seconds = upload_timeout_seconds
        self._step = WizardStep.DETAILS
        self._details: dict[str, str] = {
            "name": "",
            "client_alias": "",
            "description": "",
            "template": ProjectTemplate.STANDARD.value,
        }
        self._project: Project | None = None

    @property
    def step(self) -> WizardStep:
        return self._step

    @property
    def step_number(self) -> int:
        return int(self._step)

    @property
    def progress(self) -> float:
        """Completion percentage shown above the wizard."""
        return self._step / len(WizardStep) * 100

    @property
    def details(self) -> dict[str, str]:
        return dict(self._details)

    @property
    def tracker(self) -> UploadTracker:
        return self._tracker

    def update_details(self, **values: str) -> None:
        """Set detail fields by name.

        Raises:
            WizardError: on an unknown field or template.
        """
        unknown = sorted(set(values) - set(_DETAIL_FIELDS))
        if unknown:
            raise WizardError(f"Unknown detail fields: {', '.join(unknown)}")
        template = values.get("template")
        if template is not None and template not in {t.value for t in ProjectTemplate}:
            raise WizardError(f"Unknown project template '{template}'")
        self._details.update(values)

    def blockers(self) -> list[str]:
        """What keeps the current step from advancing, for display."""
        if self._step is WizardStep.DETAILS:
            return failing_fields(DETAILS_RULES, self._details)
        if self._step is WizardStep.DOCUMENT_UPLOAD:
            missing = gate.missing(self._registry.requirements(), self._tracker.list())
            return sorted(t.value for t in missing)
        return []

    def expire_stale_uploads(self) -> list[str]:
        """Fail uploads stuck in flight past the configured timeout."""
        if self._upload_timeout_seconds is None:
            return []
        return self._tracker.expire_stale(self._upload_timeout_seconds)

    def can_advance(self) -> bool:
        return self._step is not WizardStep.REVIEW and not self.blockers()

    def next(self) -> WizardStep:
        """Advance one step if the current one is complete.

        Raises:
            IncompleteDetailsError: on the details step with blank required fields.
            IntakeIncompleteError: on the upload step with required documents missing.
            WizardError: on the review step, which only allows finalize.
        """
        if self._step is WizardStep.REVIEW:
            raise WizardError("Review is the last step; finalize to create the project")
        if self._step is WizardStep.DETAILS:
            self._check_details()
        else:
            self._check_intake()
        self._step = WizardStep(self._step + 1)
        return self._step

    def back(self) -> WizardStep:
        if self._step is not WizardStep.DETAILS:
            self._step = WizardStep(self._step - 1)
        return self._step

    def fields(self) -> ProjectFields:
        return ProjectFields(
            name=self._details["name"].strip(),
            client_alias=self._details["client_alias"].strip(),
            description=self._details["description"].strip(),
            template=ProjectTemplate(self._details["template"]),
        )

    def finalize(self) -> Project:
        """Create the project from the review step and send it to generation.

        The ready uploads are handed to storage as generation input and the
        session's tracker is cleared afterwards. If the project was created but
        could not be submitted, calling finalize again submits that same project
        with the current documents instead of creating another one.

        Raises:
            WizardError: outside the review step or when already submitted.
            IncompleteDetailsError, IntakeIncompleteError: if the collected
                data no longer satisfies the earlier steps.
        """
        if self._project is not None and self._project.status is not ProjectStatus.DRAFT:
            raise WizardError(f"Project {self._project.id} was already created")
        if self._step is not WizardStep.REVIEW:
            raise WizardError("Project can only be created from the review step")
        self._check_details()
        self._check_intake()

        ready_documents = self._tracker.ready_documents()
        if self._project is None:
            self._project = self._create(ready_documents)
        else:
            self._store.replace_inputs(self._project.id, ready_documents)
            Log.info("Resubmitting draft project", project_id=self._project.id)
        self._workflow.submit(self._project, ready_documents)
        self._tracker.clear()
        return self._project

    def _create(self, ready_documents: list[UploadedDocument]) -> Project:
        fields = self.fields()
        project_id = self._store.create_project(fields, ready_documents, self._created_by)
        Log.info(
            "Project created",
            project_id=project_id,
            documents=len(ready_documents),
        )
        return Project(
            id=project_id,
            name=fields.name,
            client_alias=fields.client_alias,
            description=fields.description,
            template=fields.template,
            created_by=self._created_by,
        )

    def _check_details(self) -> None:
        missing_fields = failing_fields(DETAILS_RULES, self._details)
        if missing_fields:
            raise IncompleteDetailsError(missing_fields)

    def _check_intake(self) -> None:
        missing = gate.missing(self._registry.requirements(), self._tracker.list())
        if missing:
            raise IntakeIncompleteError(missing)


def build_wizard(
    settings: Settings,
    store: BaseProjectStore,
    created_by: str | None = None,
    registry: DocumentRegistry | None = None,
) -> WizardController:
    """Build a wizard session with settings-driven upload limits and timeout."""
    registry = registry or DocumentRegistry()
    return WizardController(
        registry,
        build_upload_tracker(settings, registry),
        store,
        ProjectWorkflow(registry, store),
        created_by=created_by or settings.default_created_by,
        upload_timeout_seconds=settings.upload_timeout_seconds,
    )
