from __future__ import annotations

import threading
import uuid
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import PurePath

from bpmnhub.config.settings import Settings
from bpmnhub.intake.exceptions import StaleIdError, UnsupportedFileError
from bpmnhub.intake.models import (
    DocumentType,
    UploadedDocument,
    UploadStatus,
    UploadSummary,
)
from bpmnhub.intake.registry import DocumentRegistry
from bpmnhub.logging.logger import Log

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def format_file_size(size_bytes: int) -> str:
    """Human-readable size: ``0 Bytes``, ``512 Bytes``, ``1.5 KB``, ``2 MB``."""
    if size_bytes <= 0:
        return "0 Bytes"
    value = float(size_bytes)
    exponent = 0
    while value >= 1024 and exponent < len(_SIZE_UNITS) - 1:
        value /= 1024
        exponent += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[exponent]}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UploadTracker:
    """Tracks the lifecycle of files submitted during one wizard session.

    Each upload id has a single writer (its upload task). Removal is the only
    other writer and, once applied, later completion or failure signals for
    that id are discarded. All id-map access happens under one lock so a
    removal racing a completion can never bring the document back.
    """

    def __init__(
        self,
        registry: DocumentRegistry,
        *,
        accepted_extensions: Iterable[str] | None = None,
        max_size_bytes: int | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._registry = registry
        self._accepted_extensions = (
            frozenset(ext.lower() for ext in accepted_extensions)
            if accepted_extensions is not None
            else None
        )
        self._max_size_bytes = max_size_bytes
        self._clock = clock
        self._documents: dict[str, UploadedDocument] = {}
        self._cancelled: set[str] = set()
        self._lock = threading.Lock()

    def begin_upload(
        self, doc_type: DocumentType | str, filename: str, size_bytes: int
    ) -> UploadedDocument:
        """Register a new upload in status ``uploading``.

        Raises:
            InvalidTypeError: if the type is not in the registry.
            UnsupportedFileError: if the extension or size is not accepted.
        """
        requirement = self._registry.get(doc_type)
        self._check_file(filename, size_bytes)
        document = UploadedDocument(
            id=str(uuid.uuid4()),
            type=requirement.type,
            filename=filename,
            size_bytes=size_bytes,
            status=UploadStatus.UPLOADING,
            started_at=self._clock(),
            required=requirement.required,
        )
        with self._lock:
            self._documents[document.id] = document
        Log.info(
            "Upload started",
            upload_id=document.id,
            type=document.type.value,
            filename=filename,
            size=format_file_size(size_bytes),
        )
        return document

    def complete_upload(self, upload_id: str) -> None:
        """Mark an upload ready. Signals for removed uploads are ignored."""
        self._settle(upload_id, UploadStatus.READY, None)

    def fail_upload(self, upload_id: str, reason: str) -> None:
        """Mark an upload failed. Signals for removed uploads are ignored."""
        self._settle(upload_id, UploadStatus.ERROR, reason)

    def remove(self, upload_id: str) -> None:
        """Delete an upload whatever its status and cancel any pending signal."""
        with self._lock:
            document = self._documents.pop(upload_id, None)
            if document is None:
                return
            if document.status is UploadStatus.UPLOADING:
                self._cancelled.add(upload_id)
        Log.info("Upload removed", upload_id=upload_id, status=document.status.value)

    def get(self, upload_id: str) -> UploadedDocument | None:
        with self._lock:
            return self._documents.get(upload_id)

    def list(self, doc_type: DocumentType | str | None = None) -> list[UploadedDocument]:
        """Snapshot of the tracked uploads in the order they were started.

        Raises:
            InvalidTypeError: if ``doc_type`` is not in the registry.
        """
        with self._lock:
            documents = list(self._documents.values())
        if doc_type is None:
            return documents
        wanted = self._registry.get(doc_type).type
        return [d for d in documents if d.type is wanted]

    def ready_documents(self) -> list[UploadedDocument]:
        return [d for d in self.list() if d.is_ready]

    def summary(self) -> UploadSummary:
        documents = self.list()
        return UploadSummary(
            total=len(documents),
            required_ready=sum(1 for d in documents if d.required and d.is_ready),
            required_total=len(self._registry.required_types()),
            ready=sum(1 for d in documents if d.is_ready),
        )

    def expire_stale(self, timeout_seconds: float) -> list[str]:
        """Fail uploads that have been in flight longer than ``timeout_seconds``.

        Returns the ids that were moved to ``error``.
        """
        deadline = self._clock() - timedelta(seconds=timeout_seconds)
        stale = [
            d.id
            for d in self.list()
            if d.status is UploadStatus.UPLOADING and d.started_at <= deadline
        ]
        for upload_id in stale:
            self.fail_upload(upload_id, "Upload timed out")
        return stale

    def clear(self) -> None:
        """Drop every upload; in-flight ones are cancelled."""
        with self._lock:
            self._cancelled.update(
                d.id
                for d in self._documents.values()
                if d.status is UploadStatus.UPLOADING
            )
            self._documents.clear()

    def _settle(
        self, upload_id: str, status: UploadStatus, reason: str | None
    ) -> None:
        try:
            with self._lock:
                document = self._transition(upload_id, status, reason)
        except StaleIdError as exc:
            Log.debug(f"Ignoring upload signal: {exc}", upload_id=upload_id)
            return
        if status is UploadStatus.ERROR:
            Log.warning("Upload failed", upload_id=upload_id, reason=reason)
        else:
            Log.info("Upload ready", upload_id=upload_id, type=document.type.value)

    def _transition(
        self, upload_id: str, status: UploadStatus, reason: str | None
    ) -> UploadedDocument:
        if upload_id in self._cancelled:
            self._cancelled.discard(upload_id)
            raise StaleIdError(f"upload {upload_id} was removed")
        document = self._documents.get(upload_id)
        if document is None:
            raise StaleIdError(f"upload {upload_id} is unknown")
        if document.status is not UploadStatus.UPLOADING:
            raise StaleIdError(
                f"upload {upload_id} already settled as {document.status.value}"
            )
        updated = replace(document, status=status, error_message=reason)
        self._documents[upload_id] = updated
        return updated

    def _check_file(self, filename: str, size_bytes: int) -> None:
        if size_bytes < 0:
            raise UnsupportedFileError(f"Invalid size {size_bytes} for '{filename}'")
        if self._max_size_bytes is not None and size_bytes > self._max_size_bytes:
            raise UnsupportedFileError(
                f"'{filename}' is {format_file_size(size_bytes)}, "
                f"limit is {format_file_size(self._max_size_bytes)}"
            )
        if self._accepted_extensions is None:
            return
        extension = PurePath(filename).suffix.lower()
        if extension not in self._accepted_extensions:
            raise UnsupportedFileError(
                f"'{filename}' has unsupported extension; accepted: "
                f"{sorted(self._accepted_extensions)}"
            )


def build_upload_tracker(
    settings: Settings, registry: DocumentRegistry | None = None
) -> UploadTracker:
    """Build a tracker bounded by the configured extensions and size limit."""
    return UploadTracker(
        registry or DocumentRegistry(),
        accepted_extensions=settings.accepted_upload_extensions,
        max_size_bytes=settings.max_upload_size_bytes,
    )
