from collections.abc import Callable
from datetime import datetime, timezone

import pytest

from bpmnhub.intake.models import DocumentType, UploadedDocument, UploadStatus
from bpmnhub.intake.registry import DocumentRegistry
from bpmnhub.intake.tracker import UploadTracker

VALID_BPMN = """<?xml version="1.0" encoding="UTF-8"?>
<bpmn:definitions xmlns:bpmn="http://www.omg.org/spec/BPMN/20100524/MODEL" id="Definitions_1">
  <bpmn:process id="Process_1" isExecutable="true">
    <bpmn:startEvent id="StartEvent_1" />
    <bpmn:task id="Task_1" name="Review request" />
    <bpmn:endEvent id="EndEvent_1" />
  </bpmn:process>
</bpmn:definitions>
"""

BPMN_WITHOUT_END_EVENT = """<?xml version="1.0" encoding="UTF-8"?>
<bpmn:definitions xmlns:bpmn="http://www.omg.org/spec/BPMN/20100524/MODEL" id="Definitions_1">
  <bpmn:process id="Process_1">
    <bpmn:startEvent id="StartEvent_1" />
  </bpmn:process>
</bpmn:definitions>
"""


@pytest.fixture()
def valid_bpmn() -> str:
    return VALID_BPMN


@pytest.fixture()
def bpmn_without_end_event() -> str:
    return BPMN_WITHOUT_END_EVENT


@pytest.fixture()
def registry() -> DocumentRegistry:
    return DocumentRegistry()


@pytest.fixture()
def tracker(registry: DocumentRegistry) -> UploadTracker:
    return UploadTracker(registry)


@pytest.fixture()
def make_upload() -> Callable[..., UploadedDocument]:
    """Build an UploadedDocument snapshot without going through a tracker."""

    def _make(
        doc_type: DocumentType = DocumentType.TRANSCRIPTION,
        status: UploadStatus = UploadStatus.READY,
        upload_id: str = "u-1",
    ) -> UploadedDocument:
        return UploadedDocument(
            id=upload_id,
            type=doc_type,
            filename=f"{doc_type.value}.pdf",
            size_bytes=1024,
            status=status,
            started_at=datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
        )

    return _make
