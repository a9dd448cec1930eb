from collections.abc import Sequence
from typing import Any

from psycopg.errors import ForeignKeyViolation
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from bpmnhub.database.base import BaseProjectStore
from bpmnhub.database.connection import get_connection
from bpmnhub.database.exceptions import ProjectNotFoundError
from bpmnhub.diagram.models import DiagramArtifact, DiagramKind
from bpmnhub.intake.models import UploadedDocument
from bpmnhub.workflow.models import Project, ProjectFields, ProjectStatus, ProjectTemplate


class ProjectRepository(BaseProjectStore):
    """Database operations for the projects, project_inputs and diagram_artifacts tables."""

    def create_project(
        self,
        fields: ProjectFields,
        ready_documents: Sequence[UploadedDocument],
        created_by: str,
    ) -> int:
        """Insert a draft project and the descriptors of its ready documents."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO projects
                    (name, client_alias, description, template, status, created_by)
                    VALUES (%s, %s, %s, %s, 'draft', %s)
                    RETURNING id
                    """,
                    (
                        fields.name,
                        fields.client_alias,
                        fields.description,
                        fields.template.value,
                        created_by,
                    ),
                )
                row = cur.fetchone()
                if row is None:
                    raise RuntimeError("INSERT INTO projects returned no id")
                project_id: int = row[0]
                cur.execute(
                    """
                    INSERT INTO project_inputs (project_id, documents)
                    VALUES (%s, %s)
                    """,
                    (project_id, _documents_payload(ready_documents)),
                )
            conn.commit()
        return project_id

    def replace_inputs(
        self, project_id: int, ready_documents: Sequence[UploadedDocument]
    ) -> None:
        """Upsert the document descriptors read by the generation workflow."""
        with get_connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO project_inputs (project_id, documents)
                        VALUES (%s, %s)
                        ON CONFLICT (project_id) DO UPDATE
                        SET documents = EXCLUDED.documents, updated_at = NOW()
                        """,
                        (project_id, _documents_payload(ready_documents)),
                    )
            except ForeignKeyViolation as exc:
                conn.rollback()
                raise ProjectNotFoundError(f"Project {project_id} not found") from exc
            conn.commit()

    def persist_artifact(self, project_id: int, artifact: DiagramArtifact) -> None:
        with get_connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO diagram_artifacts
                        (id, project_id, kind, revision, raw_xml, created_at, cycle)
                        VALUES (%s, %s, %s, %s, %s, %s, %s)
                        """,
                        (
                            artifact.id,
                            project_id,
                            artifact.kind.value,
                            artifact.revision,
                            artifact.raw_xml,
                            artifact.created_at,
                            artifact.cycle,
                        ),
                    )
            except ForeignKeyViolation as exc:
                conn.rollback()
                raise ProjectNotFoundError(f"Project {project_id} not found") from exc
            conn.commit()

    def find_by_id(self, project_id: int) -> Project:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, name, client_alias, description, template, status,
                           created_by, cycle, last_error, updated_at
                    FROM projects
                    WHERE id = %s
                    """,
                    (project_id,),
                )
                row = cur.fetchone()
                if row is None:
                    raise ProjectNotFoundError(f"Project {project_id} not found")
                cur.execute(
                    """
                    SELECT id, kind, revision, raw_xml, created_at, cycle
                    FROM diagram_artifacts
                    WHERE project_id = %s
                    ORDER BY created_at, revision
                    """,
                    (project_id,),
                )
                artifact_rows = cur.fetchall()

        return Project(
            id=row["id"],
            name=row["name"],
            client_alias=row["client_alias"],
            description=row["description"],
            template=ProjectTemplate(row["template"]),
            status=ProjectStatus(row["status"]),
            created_by=row["created_by"],
            cycle=row["cycle"],
            last_error=row["last_error"],
            updated_at=row["updated_at"],
            artifacts=[self._row_to_artifact(r) for r in artifact_rows],
        )

    def update_project(self, project: Project) -> None:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE projects
                    SET status = %s, cycle = %s, last_error = %s, updated_at = %s
                    WHERE id = %s
                    """,
                    (
                        project.status.value,
                        project.cycle,
                        project.last_error,
                        project.updated_at,
                        project.id,
                    ),
                )
                if cur.rowcount == 0:
                    raise ProjectNotFoundError(f"Project {project.id} not found")
            conn.commit()

    @staticmethod
    def _row_to_artifact(row: dict[str, Any]) -> DiagramArtifact:
        return DiagramArtifact(
            id=str(row["id"]),
            kind=DiagramKind(row["kind"]),
            revision=row["revision"],
            raw_xml=row["raw_xml"],
            created_at=row["created_at"],
            cycle=row["cycle"],
        )


def _documents_payload(ready_documents: Sequence[UploadedDocument]) -> Jsonb:
    return Jsonb(
        [
            {
                "type": d.type.value,
                "filename": d.filename,
                "size_bytes": d.size_bytes,
            }
            for d in ready_documents
        ]
    )
