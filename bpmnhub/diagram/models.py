from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class DiagramKind(str, Enum):
    AS_IS = "as_is"
    TO_BE = "to_be"


@dataclass(frozen=True)
class DiagramArtifact:
    """A saved diagram revision. Never modified once created.

    ``cycle`` is the processing cycle that generated the diagram, or ``None``
    for a diagram saved from the editor.
    """

    id: str
    kind: DiagramKind
    revision: int
    raw_xml: str
    created_at: datetime
    cycle: int | None = None


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of the structural check of a BPMN document."""

    ok: bool
    missing_elements: frozenset[str] = field(default_factory=frozenset)

    def message(self) -> str:
        if self.ok:
            return "Diagram is structurally valid"
        return "Diagram is missing: " + ", ".join(sorted(self.missing_elements))
