from bpmnhub.intake.gate import is_satisfied, missing
from bpmnhub.intake.registry import DEFAULT_REQUIREMENTS, DocumentRegistry
from bpmnhub.intake.tracker import UploadTracker, build_upload_tracker, format_file_size

__all__ = [
    "DEFAULT_REQUIREMENTS",
    "DocumentRegistry",
    "UploadTracker",
    "build_upload_tracker",
    "format_file_size",
    "is_satisfied",
    "missing",
]
