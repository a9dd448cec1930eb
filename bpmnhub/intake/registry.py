from collections.abc import Iterable

from bpmnhub.intake.exceptions import InvalidTypeError
from bpmnhub.intake.models import DocumentRequirement, DocumentType

DEFAULT_REQUIREMENTS: tuple[DocumentRequirement, ...] = (
    DocumentRequirement(
        type=DocumentType.TRANSCRIPTION,
        required=True,
        description="Meeting transcription following standard agenda",
        label="Transcription",
    ),
    DocumentRequirement(
        type=DocumentType.SCOPE,
        required=False,
        description="Project scope document (required for To-Be generation)",
        label="Project Scope",
    ),
    DocumentRequirement(
        type=DocumentType.PROPOSAL,
        required=False,
        description="Commercial proposal or project specification",
        label="Proposal",
    ),
    DocumentRequirement(
        type=DocumentType.CONTRACT,
        required=False,
        description="Service contract or agreement",
        label="Contract",
    ),
    DocumentRequirement(
        type=DocumentType.BUSINESS_RULES,
        required=False,
        description="Business rules and requirements document",
        label="Business Rules",
    ),
    DocumentRequirement(
        type=DocumentType.OTHER,
        required=False,
        description="Additional supporting documents",
        label="Other",
    ),
)


class DocumentRegistry:
    """Immutable catalog of recognised document types."""

    def __init__(
        self, requirements: Iterable[DocumentRequirement] = DEFAULT_REQUIREMENTS
    ) -> None:
        self._requirements = tuple(requirements)
        self._by_type = {r.type: r for r in self._requirements}
        if len(self._by_type) != len(self._requirements):
            raise ValueError("Document types must be unique within a registry")

    def requirements(self) -> tuple[DocumentRequirement, ...]:
        return self._requirements

    def required_types(self) -> frozenset[DocumentType]:
        return frozenset(r.type for r in self._requirements if r.required)

    def get(self, doc_type: DocumentType | str) -> DocumentRequirement:
        """Look up a requirement by type or its string value.

        Raises:
            InvalidTypeError: if the type is not part of this registry.
        """
        try:
            key = DocumentType(doc_type)
        except ValueError as exc:
            raise InvalidTypeError(f"Unknown document type '{doc_type}'") from exc
        requirement = self._by_type.get(key)
        if requirement is None:
            raise InvalidTypeError(f"Document type '{key.value}' is not accepted")
        return requirement

    def __contains__(self, doc_type: object) -> bool:
        try:
            return DocumentType(doc_type) in self._by_type
        except ValueError:
            return False
