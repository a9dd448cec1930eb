import itertools
from collections.abc import Callable

from bpmnhub.intake import gate
from bpmnhub.intake.models import (
    DocumentRequirement,
    DocumentType,
    UploadedDocument,
    UploadStatus,
)
from bpmnhub.intake.registry import DocumentRegistry
from bpmnhub.intake.tracker import UploadTracker

MakeUpload = Callable[..., UploadedDocument]

TRANSCRIPTION_AND_SCOPE = (
    DocumentRequirement(DocumentType.TRANSCRIPTION, True, "Transcript"),
    DocumentRequirement(DocumentType.SCOPE, False, "Scope"),
)


class TestScenarios:
    def test_no_uploads_blocks_on_required_type(self) -> None:
        assert gate.is_satisfied(TRANSCRIPTION_AND_SCOPE, []) is False
        assert gate.missing(TRANSCRIPTION_AND_SCOPE, []) == {DocumentType.TRANSCRIPTION}

    def test_ready_transcription_satisfies(self, tracker: UploadTracker) -> None:
        document = tracker.begin_upload("transcription", "kickoff.pdf", 100)
        tracker.complete_upload(document.id)

        assert gate.is_satisfied(TRANSCRIPTION_AND_SCOPE, tracker.list()) is True
        assert gate.missing(TRANSCRIPTION_AND_SCOPE, tracker.list()) == frozenset()


class TestReadiness:
    def test_uploading_document_does_not_count(self, make_upload: MakeUpload) -> None:
        uploads = [make_upload(status=UploadStatus.UPLOADING)]

        assert gate.missing(TRANSCRIPTION_AND_SCOPE, uploads) == {DocumentType.TRANSCRIPTION}

    def test_failed_document_does_not_count(self, make_upload: MakeUpload) -> None:
        uploads = [make_upload(status=UploadStatus.ERROR)]

        assert not gate.is_satisfied(TRANSCRIPTION_AND_SCOPE, uploads)

    def test_one_ready_among_failures_is_enough(self, make_upload: MakeUpload) -> None:
        uploads = [
            make_upload(status=UploadStatus.ERROR, upload_id="a"),
            make_upload(status=UploadStatus.READY, upload_id="b"),
        ]

        assert gate.is_satisfied(TRANSCRIPTION_AND_SCOPE, uploads)

    def test_optional_types_never_block(self, make_upload: MakeUpload) -> None:
        uploads = [make_upload(DocumentType.TRANSCRIPTION)]

        assert gate.missing(DocumentRegistry().requirements(), uploads) == frozenset()

    def test_ready_optional_type_does_not_satisfy_required(
        self, make_upload: MakeUpload
    ) -> None:
        uploads = [make_upload(DocumentType.SCOPE)]

        assert gate.missing(TRANSCRIPTION_AND_SCOPE, uploads) == {DocumentType.TRANSCRIPTION}

    def test_no_required_types_is_always_satisfied(self) -> None:
        requirements = [DocumentRequirement(DocumentType.OTHER, False, "Other")]

        assert gate.is_satisfied(requirements, [])


class TestProperties:
    def test_missing_matches_definition_for_all_combinations(
        self, make_upload: MakeUpload
    ) -> None:
        requirements = (
            DocumentRequirement(DocumentType.TRANSCRIPTION, True, "t"),
            DocumentRequirement(DocumentType.SCOPE, True, "s"),
            DocumentRequirement(DocumentType.OTHER, False, "o"),
        )
        candidates = [
            make_upload(doc_type, status, upload_id=f"{doc_type.value}-{status.value}")
            for doc_type in (DocumentType.TRANSCRIPTION, DocumentType.SCOPE, DocumentType.OTHER)
            for status in UploadStatus
        ]
        for size in range(len(candidates) + 1):
            for uploads in itertools.combinations(candidates, size):
                expected = {
                    r.type
                    for r in requirements
                    if r.required
                    and not any(u.type is r.type and u.is_ready for u in uploads)
                }
                assert gate.missing(requirements, uploads) == expected
                assert gate.is_satisfied(requirements, uploads) is (not expected)

    def test_order_of_inputs_does_not_matter(self, make_upload: MakeUpload) -> None:
        requirements = list(DocumentRegistry().requirements())
        uploads = [
            make_upload(DocumentType.SCOPE, upload_id="1"),
            make_upload(DocumentType.TRANSCRIPTION, UploadStatus.UPLOADING, upload_id="2"),
            make_upload(DocumentType.TRANSCRIPTION, upload_id="3"),
        ]

        baseline = gate.missing(requirements, uploads)
        for permutation in itertools.permutations(uploads):
            assert gate.missing(list(reversed(requirements)), permutation) == baseline

    def test_accepts_generators(self, make_upload: MakeUpload) -> None:
        uploads = (u for u in [make_upload()])

        assert gate.is_satisfied(iter(TRANSCRIPTION_AND_SCOPE), uploads)
