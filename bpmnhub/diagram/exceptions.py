from collections.abc import Iterable


class DiagramError(Exception):
    """Base exception for diagram handling errors."""


class StructuralInvalidError(DiagramError):
    """Raised when a BPMN document lacks required elements."""

    def __init__(self, missing_elements: Iterable[str]) -> None:
        self.missing_elements = frozenset(missing_elements)
        super().__init__(
            "Diagram is missing: " + ", ".join(sorted(self.missing_elements))
        )


class DiagramParseError(DiagramError):
    """Raised when diagram text cannot be parsed as XML for re-serialization."""
