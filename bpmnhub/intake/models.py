from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class DocumentType(str, Enum):
    TRANSCRIPTION = "transcription"
    SCOPE = "scope"
    PROPOSAL = "proposal"
    CONTRACT = "contract"
    BUSINESS_RULES = "business_rules"
    OTHER = "other"


class UploadStatus(str, Enum):
    UPLOADING = "uploading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class DocumentRequirement:
    """One entry of the document catalog shown on the upload step."""

    type: DocumentType
    required: bool
    description: str
    label: str = ""


@dataclass(frozen=True)
class UploadedDocument:
    """Snapshot of a user-submitted file. The tracker replaces it on each transition."""

    id: str
    type: DocumentType
    filename: str
    size_bytes: int
    status: UploadStatus
    started_at: datetime
    required: bool = False
    error_message: str | None = None

    @property
    def is_ready(self) -> bool:
        return self.status is UploadStatus.READY


@dataclass(frozen=True)
class UploadSummary:
    """Counts displayed under the upload step."""

    total: int
    required_ready: int
    required_total: int
    ready: int
