from abc import ABC, abstractmethod
from collections.abc import Sequence

from bpmnhub.diagram.models import DiagramArtifact
from bpmnhub.intake.models import UploadedDocument
from bpmnhub.workflow.models import Project, ProjectFields


class BaseProjectStore(ABC):
    """Contract for the storage layer used by the wizard and the workflow."""

    @abstractmethod
    def create_project(
        self,
        fields: ProjectFields,
        ready_documents: Sequence[UploadedDocument],
        created_by: str,
    ) -> int:
        """Create a project in status ``draft`` and queue its generation input.

        Returns:
            The new project id.
        """

    @abstractmethod
    def persist_artifact(self, project_id: int, artifact: DiagramArtifact) -> None:
        """Store a validated diagram revision.

        Raises:
            ProjectNotFoundError: if the project does not exist.
        """

    @abstractmethod
    def find_by_id(self, project_id: int) -> Project:
        """Load a project with its artifacts.

        Raises:
            ProjectNotFoundError: if the project does not exist.
        """

    @abstractmethod
    def update_project(self, project: Project) -> None:
        """Persist status, cycle, last error and update time.

        Raises:
            ProjectNotFoundError: if the project does not exist.
        """

    @abstractmethod
    def replace_inputs(
        self, project_id: int, ready_documents: Sequence[UploadedDocument]
    ) -> None:
        """Replace the generation input of a project with new documents.

        Raises:
            ProjectNotFoundError: if the project does not exist.
        """
