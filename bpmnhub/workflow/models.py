from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from bpmnhub.diagram.models import DiagramArtifact, DiagramKind


class ProjectStatus(str, Enum):
    DRAFT = "draft"
    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"


class ProjectTemplate(str, Enum):
    STANDARD = "standard"
    SALES = "sales"
    SUPPORT = "support"
    ONBOARDING = "onboarding"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ProjectFields:
    """Validated form fields collected on the details step."""

    name: str
    client_alias: str
    description: str = ""
    template: ProjectTemplate = ProjectTemplate.STANDARD


@dataclass
class Project:
    """A BPMN-mapping project and its append-only diagram history."""

    id: int
    name: str
    client_alias: str
    created_by: str
    status: ProjectStatus = ProjectStatus.DRAFT
    description: str = ""
    template: ProjectTemplate = ProjectTemplate.STANDARD
    updated_at: datetime = field(default_factory=utcnow)
    artifacts: list[DiagramArtifact] = field(default_factory=list)
    last_error: str | None = None
    cycle: int = 0

    @property
    def artifacts_count(self) -> int:
        return len(self.artifacts)

    @property
    def has_as_is(self) -> bool:
        return any(a.kind is DiagramKind.AS_IS for a in self.artifacts)

    @property
    def has_to_be(self) -> bool:
        return any(a.kind is DiagramKind.TO_BE for a in self.artifacts)

    def latest(self, kind: DiagramKind) -> DiagramArtifact | None:
        """Highest revision of ``kind``, if any."""
        of_kind = [a for a in self.artifacts if a.kind is kind]
        return max(of_kind, key=lambda a: a.revision, default=None)

    def generated(self, kind: DiagramKind, cycle: int) -> DiagramArtifact | None:
        """The diagram of ``kind`` recorded for processing cycle ``cycle``, if any."""
        for artifact in self.artifacts:
            if artifact.kind is kind and artifact.cycle == cycle:
                return artifact
        return None

    def touch(self) -> None:
        self.updated_at = utcnow()


@dataclass(frozen=True)
class TransitionResult:
    """What a workflow trigger did to a project."""

    status: ProjectStatus
    applied: bool = True
    error: str | None = None
