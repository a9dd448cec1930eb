from bpmnhub.workflow.models import ProjectStatus


class WorkflowError(Exception):
    """Base exception for project workflow errors."""


class InvalidTransitionError(WorkflowError):
    """Raised when a caller trigger is not allowed from the project's status."""

    def __init__(self, trigger: str, status: ProjectStatus) -> None:
        self.trigger = trigger
        self.status = status
        super().__init__(f"Cannot {trigger} a project in status '{status.value}'")
