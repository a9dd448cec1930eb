"""Structural checks and revision numbering for BPMN diagram artifacts.

The check is a tag-presence scan over the raw text, not a BPMN schema
validation: a document passes when it opens a ``definitions``, a ``process``,
a ``startEvent`` and an ``endEvent`` element, with or without a namespace
prefix. Namespace URIs are not inspected.
"""

import re
from collections.abc import Iterable

from bpmnhub.diagram.models import DiagramArtifact, DiagramKind, ValidationResult

REQUIRED_ELEMENTS: tuple[str, ...] = ("definitions", "process", "startEvent", "endEvent")

_TAG_PATTERNS: dict[str, re.Pattern[str]] = {
    tag: re.compile(rf"<(?:[A-Za-z_][\w.\-]*:)?{tag}(?=[\s/>])")
    for tag in REQUIRED_ELEMENTS
}


def validate(xml: str) -> ValidationResult:
    """Report which required BPMN elements are absent from ``xml``.

    Element order and formatting do not matter; the same text always yields
    the same result.
    """
    missing = frozenset(
        tag for tag, pattern in _TAG_PATTERNS.items() if not pattern.search(xml or "")
    )
    return ValidationResult(ok=not missing, missing_elements=missing)


def next_revision(artifacts: Iterable[DiagramArtifact], kind: DiagramKind) -> int:
    """Return 1 + the highest revision of ``kind``, or 1 when there is none."""
    revisions = [a.revision for a in artifacts if a.kind is kind]
    return max(revisions, default=0) + 1
