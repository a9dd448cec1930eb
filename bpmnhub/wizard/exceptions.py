from collections.abc import Iterable


class WizardError(Exception):
    """Base exception for project-creation wizard errors."""


class IncompleteDetailsError(WizardError):
    """Raised when required detail fields are blank."""

    def __init__(self, missing_fields: Iterable[str]) -> None:
        self.missing_fields = tuple(missing_fields)
        super().__init__(f"Missing project details: {', '.join(self.missing_fields)}")
