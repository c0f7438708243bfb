"""Tests for chat-ready paper context."""

from datetime import datetime, timezone

from examprep.models.paper import ExtractionStatus, Paper
from examprep.services.context_service import build_paper_context


def test_completed_paper_passes_text_through():
    extracted_at = datetime(2024, 5, 1, tzinfo=timezone.utc)
    paper = Paper(
        id="p1",
        paper_extracted_text="1) Define velocity.",
        marking_scheme_extracted_text="1) speed in a given direction [1]",
        text_extraction_status=ExtractionStatus.COMPLETED,
        text_extracted_at=extracted_at,
    )

    context = build_paper_context(paper)

    assert context.paper_content == "1) Define velocity."
    assert context.marking_scheme_content == "1) speed in a given direction [1]"
    assert context.extracted_at == extracted_at


def test_failed_paper_gets_status_preamble():
    paper = Paper(
        id="p2",
        title="Physics Paper 2",
        year=2022,
        paper_number="2",
        text_extraction_status=ExtractionStatus.FAILED,
        extraction_error="Paper extraction failed: timeout",
    )

    context = build_paper_context(paper)

    assert context.paper_content.startswith("Exam Paper: Physics Paper 2\nYear: 2022\nPaper Number: 2")
    assert "Text extraction for this exam paper failed." in context.paper_content
    assert "Text extraction for this marking scheme failed." in context.marking_scheme_content
    assert context.error == "Paper extraction failed: timeout"


def test_processing_paper_without_metadata():
    paper = Paper(id="p3", text_extraction_status=ExtractionStatus.PROCESSING)

    context = build_paper_context(paper)

    assert "Exam Paper: Untitled" in context.paper_content
    assert "Year: Unknown" in context.paper_content
    assert "still in progress" in context.paper_content


def test_serializes_with_wire_names():
    context = build_paper_context(Paper(id="p4"))
    dumped = context.model_dump(by_alias=True)

    assert set(dumped) == {
        "paperId", "status", "extractedAt", "error", "paperContent", "markingSchemeContent"
    }
