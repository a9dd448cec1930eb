"""Intake gate: decides whether the collected documents allow the project to proceed."""

from collections.abc import Iterable

from bpmnhub.intake.models import DocumentRequirement, DocumentType, UploadedDocument


def missing(
    requirements: Iterable[DocumentRequirement],
    uploads: Iterable[UploadedDocument],
) -> frozenset[DocumentType]:
    """Return the required document types that have no ready upload.

    Non-required types never appear in the result. The answer depends only on
    the contents of both collections, not on their order.
    """
    ready_types = {u.type for u in uploads if u.is_ready}
    return frozenset(
        r.type for r in requirements if r.required and r.type not in ready_types
    )


def is_satisfied(
    requirements: Iterable[DocumentRequirement],
    uploads: Iterable[UploadedDocument],
) -> bool:
    """True iff every required type has at least one ready upload."""
    return not missing(requirements, uploads)
