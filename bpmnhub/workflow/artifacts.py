import uuid

from bpmnhub.database.base import BaseProjectStore
from bpmnhub.diagram.exceptions import StructuralInvalidError
from bpmnhub.diagram.modeler import ModelerHandle
from bpmnhub.diagram.models import DiagramArtifact, DiagramKind
from bpmnhub.diagram.validator import next_revision, validate
from bpmnhub.logging.logger import Log
from bpmnhub.workflow.models import Project, utcnow


class ArtifactRecorder:
    """Validates diagrams and appends them to a project as new revisions."""

    def __init__(self, store: BaseProjectStore) -> None:
        self._store = store

    def save(
        self, project: Project, modeler: ModelerHandle, kind: DiagramKind
    ) -> DiagramArtifact:
        """Save the diagram open in ``modeler`` as the next revision of ``kind``."""
        artifact = self.record(project, modeler.export_xml(), kind)
        modeler.mark_saved()
        return artifact

    def record(
        self,
        project: Project,
        xml: str,
        kind: DiagramKind,
        cycle: int | None = None,
    ) -> DiagramArtifact:
        """Append ``xml`` to the project's history and hand it to storage.

        ``cycle`` tags a generated diagram with the processing cycle it belongs to.

        Raises:
            StructuralInvalidError: if the document lacks required elements.
                Nothing is appended or persisted in that case.
        """
        result = validate(xml)
        if not result.ok:
            raise StructuralInvalidError(result.missing_elements)

        artifact = DiagramArtifact(
            id=str(uuid.uuid4()),
            kind=kind,
            revision=next_revision(project.artifacts, kind),
            raw_xml=xml,
            created_at=utcnow(),
            cycle=cycle,
        )
        self._store.persist_artifact(project.id, artifact)
        project.artifacts.append(artifact)
        project.touch()
        Log.info(
            "Diagram saved",
            project_id=project.id,
            kind=kind.value,
            revision=artifact.revision,
        )
        return artifact
