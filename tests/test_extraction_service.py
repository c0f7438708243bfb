"""Tests for the text extraction service and outcome folding."""

import threading
import time

import pytest

from examprep.exceptions import BadRequestError, NotFoundError
from examprep.models.paper import ExtractionStatus
from examprep.services.extraction_service import (
    NO_TEXT_ERROR,
    SourceOutcome,
    TextExtractionService,
    fold_outcomes,
)
from stubs import StubStorage

PAPER_KEY = ("exam-papers", "2023/maths/paper1.pdf")
SCHEME_KEY = ("marking-schemes", "2023/maths/paper1-ms.pdf")


@pytest.fixture
def service(repository, storage, extractor):
    return TextExtractionService(repository, storage, extractor)


class TestFoldOutcomes:
    def test_all_text_is_completed_without_error(self):
        status, error = fold_outcomes([SourceOutcome("Paper", text="a"), SourceOutcome("Scheme", text="b")])
        assert status == ExtractionStatus.COMPLETED
        assert error is None

    def test_partial_failure_is_completed_and_keeps_error(self):
        status, error = fold_outcomes(
            [SourceOutcome("Paper", text="a"), SourceOutcome("Scheme", error="Scheme extraction failed: boom")]
        )
        assert status == ExtractionStatus.COMPLETED
        assert error == "Scheme extraction failed: boom"

    def test_both_failures_are_joined(self):
        status, error = fold_outcomes(
            [SourceOutcome("Paper", error="one"), SourceOutcome("Scheme", error="two")]
        )
        assert status == ExtractionStatus.FAILED
        assert error == "one; two"

    def test_empty_text_without_errors_fails(self):
        status, error = fold_outcomes([SourceOutcome("Paper"), SourceOutcome("Scheme")])
        assert status == ExtractionStatus.FAILED
        assert error == NO_TEXT_ERROR


class TestTextExtractionService:
    def test_extracts_both_documents(self, service, repository, storage):
        storage.objects[PAPER_KEY] = b"1) Question one text"
        storage.objects[SCHEME_KEY] = b"1) Award one mark"

        result = service.extract("paper-1")

        assert result.success is True
        assert result.message == "Text extraction completed successfully"
        assert result.paper_text_length == len("1) Question one text")
        assert result.marking_scheme_text_length == len("1) Award one mark")

        stored = repository.get_paper("paper-1")
        assert stored.text_extraction_status == ExtractionStatus.COMPLETED
        assert stored.paper_extracted_text == "1) Question one text"
        assert stored.marking_scheme_extracted_text == "1) Award one mark"
        assert stored.extraction_error is None
        assert stored.text_extracted_at is not None
        assert storage.calls == [PAPER_KEY, SCHEME_KEY]

    def test_status_passes_through_processing(self, service, repository, storage):
        storage.objects[PAPER_KEY] = b"paper text"
        storage.objects[SCHEME_KEY] = b"scheme text"

        service.extract("paper-1")

        assert repository.status_history["paper-1"] == [
            ExtractionStatus.PROCESSING,
            ExtractionStatus.COMPLETED,
        ]

    def test_scheme_failure_still_completes(self, service, repository, storage):
        storage.objects[PAPER_KEY] = b"Find the derivative of x^2"
        storage.objects[SCHEME_KEY] = RuntimeError("bucket unavailable")

        result = service.extract("paper-1")

        assert result.success is True
        assert result.marking_scheme_text_length == 0
        stored = repository.get_paper("paper-1")
        assert stored.text_extraction_status == ExtractionStatus.COMPLETED
        assert stored.marking_scheme_extracted_text is None
        assert "Scheme extraction failed: bucket unavailable" in stored.extraction_error

    def test_both_failures_mark_failed(self, service, repository, storage):
        storage.objects[PAPER_KEY] = RuntimeError("paper gone")
        storage.objects[SCHEME_KEY] = RuntimeError("scheme gone")

        result = service.extract("paper-1")

        assert result.success is False
        expected = "Paper extraction failed: paper gone; Scheme extraction failed: scheme gone"
        assert result.message == expected
        stored = repository.get_paper("paper-1")
        assert stored.text_extraction_status == ExtractionStatus.FAILED
        assert stored.extraction_error == expected
        assert stored.text_extracted_at is None
        assert repository.status_history["paper-1"][-1] == ExtractionStatus.FAILED

    def test_paper_failure_does_not_stop_scheme(self, service, repository, storage, extractor):
        storage.objects[PAPER_KEY] = RuntimeError("paper gone")
        storage.objects[SCHEME_KEY] = b"scheme text"

        result = service.extract("paper-1")

        assert result.success is True
        assert extractor.calls == 1
        stored = repository.get_paper("paper-1")
        assert stored.paper_extracted_text is None
        assert stored.marking_scheme_extracted_text == "scheme text"
        assert stored.extraction_error == "Paper extraction failed: paper gone"

    def test_blank_pdfs_fail_with_no_text_error(self, service, repository, storage):
        storage.objects[PAPER_KEY] = b"   "
        storage.objects[SCHEME_KEY] = b""

        result = service.extract("paper-1")

        assert result.success is False
        assert result.message == NO_TEXT_ERROR
        assert repository.get_paper("paper-1").extraction_error == NO_TEXT_ERROR

    def test_retry_replaces_previous_results(self, service, repository, storage):
        storage.objects[PAPER_KEY] = b"first paper text"
        storage.objects[SCHEME_KEY] = b"first scheme text"
        service.extract("paper-1")

        storage.objects[SCHEME_KEY] = RuntimeError("scheme gone")
        storage.objects[PAPER_KEY] = b"second paper text"
        service.extract("paper-1")

        stored = repository.get_paper("paper-1")
        assert stored.paper_extracted_text == "second paper text"
        assert stored.marking_scheme_extracted_text is None
        assert repository.status_history["paper-1"] == [
            ExtractionStatus.PROCESSING,
            ExtractionStatus.COMPLETED,
            ExtractionStatus.PROCESSING,
            ExtractionStatus.COMPLETED,
        ]

    def test_unknown_paper(self, service, storage):
        with pytest.raises(NotFoundError) as exc_info:
            service.extract("missing")
        assert exc_info.value.message == "Exam paper not found"
        assert storage.calls == []

    def test_missing_paper_id(self, service):
        with pytest.raises(BadRequestError) as exc_info:
            service.extract("")
        assert exc_info.value.message == "Paper ID is required"

    def test_uses_configured_buckets(self, repository, storage, extractor):
        storage.objects[("papers", "2023/maths/paper1.pdf")] = b"paper"
        storage.objects[("schemes", "2023/maths/paper1-ms.pdf")] = b"scheme"
        service = TextExtractionService(
            repository, storage, extractor, paper_bucket="papers", scheme_bucket="schemes"
        )

        assert service.extract("paper-1").success is True


class BlockingStorage(StubStorage):
    """Holds the first download until released so a second caller can queue up"""

    def __init__(self, objects):
        super().__init__(objects)
        self.entered = threading.Event()
        self.release = threading.Event()

    def download(self, bucket, path):
        if not self.entered.is_set():
            self.entered.set()
            self.release.wait(timeout=5)
        return super().download(bucket, path)


def _waiters(paper_id):
    entry = TextExtractionService._locks.get(paper_id)
    return entry[1] if entry else 0


class TestPaperLocking:
    def test_unknown_ids_leave_no_lock_entries(self, service):
        before = dict(TextExtractionService._locks)

        for i in range(50):
            with pytest.raises(NotFoundError):
                service.extract(f"bogus-{i}")

        assert TextExtractionService._locks == before

    def test_lock_entry_is_dropped_after_extraction(self, service, storage):
        storage.objects[PAPER_KEY] = b"paper text"
        storage.objects[SCHEME_KEY] = RuntimeError("scheme gone")

        service.extract("paper-1")

        assert "paper-1" not in TextExtractionService._locks

    def test_concurrent_extractions_of_one_paper_are_serialized(self, repository, extractor):
        storage = BlockingStorage({PAPER_KEY: b"paper text", SCHEME_KEY: b"scheme text"})
        service = TextExtractionService(repository, storage, extractor)
        results = []

        first = threading.Thread(target=lambda: results.append(service.extract("paper-1")))
        first.start()
        assert storage.entered.wait(timeout=5)

        second = threading.Thread(target=lambda: results.append(service.extract("paper-1")))
        second.start()
        deadline = time.monotonic() + 5
        while _waiters("paper-1") < 2 and time.monotonic() < deadline:
            time.sleep(0.01)

        assert _waiters("paper-1") == 2
        assert repository.status_history["paper-1"] == [ExtractionStatus.PROCESSING]

        storage.release.set()
        first.join(timeout=5)
        second.join(timeout=5)

        assert [r.success for r in results] == [True, True]
        assert repository.status_history["paper-1"] == [
            ExtractionStatus.PROCESSING,
            ExtractionStatus.COMPLETED,
            ExtractionStatus.PROCESSING,
            ExtractionStatus.COMPLETED,
        ]
        assert storage.calls == [PAPER_KEY, SCHEME_KEY, PAPER_KEY, SCHEME_KEY]
        assert "paper-1" not in TextExtractionService._locks
