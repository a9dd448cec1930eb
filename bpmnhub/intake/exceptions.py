from collections.abc import Iterable

from bpmnhub.intake.models import DocumentType


class IntakeError(Exception):
    """Base exception for document intake errors."""


class InvalidTypeError(IntakeError):
    """Raised when an upload targets a document type missing from the registry."""


class UnsupportedFileError(IntakeError):
    """Raised when a file's extension or size is not accepted."""


class StaleIdError(IntakeError):
    """Raised internally when a signal targets a removed or settled upload."""


class IntakeIncompleteError(IntakeError):
    """Raised when required document types have no ready upload."""

    def __init__(self, missing: Iterable[DocumentType]) -> None:
        self.missing = frozenset(missing)
        names = ", ".join(sorted(t.value for t in self.missing))
        super().__init__(f"Missing required documents: {names}")
