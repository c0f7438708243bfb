"""
Extraction Service
Downloads a paper's two PDFs, converts them to text and records the result
"""
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from examprep.config import config
from examprep.exceptions import BadRequestError, NotFoundError
from examprep.models.paper import ExtractionResponse, ExtractionStatus, Paper

logger = logging.getLogger(__name__)

NO_TEXT_ERROR = "No text could be extracted from PDFs"
SUCCESS_MESSAGE = "Text extraction completed successfully"


@dataclass
class SourceOutcome:
    """Result of extracting one PDF: text on success, error message on failure"""

    label: str
    text: str = ""
    error: Optional[str] = None


def fold_outcomes(outcomes: List[SourceOutcome]) -> Tuple[ExtractionStatus, Optional[str]]:
    """
    Combine per-PDF outcomes into the final status and stored error.

    Completed when any text came out; the error of a source that failed
    alongside it is kept, otherwise the error is None. Failed otherwise, with
    the failure messages joined by "; ", or NO_TEXT_ERROR when nothing raised.
    """
    errors = [o.error for o in outcomes if o.error]
    joined = "; ".join(errors) or None

    if any(o.text for o in outcomes):
        return ExtractionStatus.COMPLETED, joined
    return ExtractionStatus.FAILED, joined or NO_TEXT_ERROR


class TextExtractionService:
    """Runs text extraction for one paper against injected collaborators"""

    # paper id -> (lock, number of callers holding or waiting on it)
    _locks: Dict[str, Tuple[threading.Lock, int]] = {}
    _locks_guard = threading.Lock()

    def __init__(self, repository, storage, extractor, paper_bucket: str = None, scheme_bucket: str = None):
        self.repository = repository
        self.storage = storage
        self.extractor = extractor
        self.paper_bucket = paper_bucket or config.PAPER_BUCKET
        self.scheme_bucket = scheme_bucket or config.MARKING_SCHEME_BUCKET

    @classmethod
    @contextmanager
    def _paper_lock(cls, paper_id: str):
        """Hold the paper's lock; the entry is dropped once nobody holds or waits on it"""
        with cls._locks_guard:
            lock, users = cls._locks.get(paper_id, (None, 0))
            lock = lock or threading.Lock()
            cls._locks[paper_id] = (lock, users + 1)
        try:
            with lock:
                yield
        finally:
            with cls._locks_guard:
                users = cls._locks[paper_id][1] - 1
                if users:
                    cls._locks[paper_id] = (lock, users)
                else:
                    del cls._locks[paper_id]

    def extract(self, paper_id: Optional[str]) -> ExtractionResponse:
        if not paper_id:
            raise BadRequestError("Paper ID is required")

        paper = self.repository.get_paper(paper_id)
        if paper is None:
            raise NotFoundError("Exam paper not found")

        # One extraction per paper at a time within this process
        with self._paper_lock(paper_id):
            return self._run(paper)

    def _run(self, paper: Paper) -> ExtractionResponse:
        paper_id = paper.id
        self.repository.mark_processing(paper_id)
        logger.info("Extracting text for paper %s", paper_id)

        outcomes = [
            self._extract_source("Paper", self.paper_bucket, paper.paper_file_url),
            self._extract_source("Scheme", self.scheme_bucket, paper.marking_scheme_file_url),
        ]
        paper_outcome, scheme_outcome = outcomes
        status, error = fold_outcomes(outcomes)
        completed = status == ExtractionStatus.COMPLETED

        self.repository.save_extraction_result(
            paper_id,
            paper_text=paper_outcome.text or None,
            marking_scheme_text=scheme_outcome.text or None,
            status=status,
            extracted_at=datetime.now(timezone.utc) if completed else None,
            error=error,
        )

        logger.info(
            "Extraction for paper %s %s (paper: %d chars, scheme: %d chars)",
            paper_id, status.value, len(paper_outcome.text), len(scheme_outcome.text),
        )

        return ExtractionResponse(
            success=completed,
            paper_id=paper_id,
            message=SUCCESS_MESSAGE if completed else error,
            paper_text_length=len(paper_outcome.text),
            marking_scheme_text_length=len(scheme_outcome.text),
        )

    def _extract_source(self, label: str, bucket: str, path: Optional[str]) -> SourceOutcome:
        try:
            data = self.storage.download(bucket, path)
            return SourceOutcome(label=label, text=self.extractor.extract(data) or "")
        except Exception as e:
            logger.error("Error extracting %s text: %s", label.lower(), e)
            return SourceOutcome(label=label, error=f"{label} extraction failed: {e}")
