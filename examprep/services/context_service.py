from examprep.models.paper import ExtractionStatus, Paper, PaperContext

STATUS_NOTES = {
    ExtractionStatus.PENDING: "Text extraction for this {document} has not started yet.",
    ExtractionStatus.PROCESSING: "Text extraction for this {document} is still in progress.",
    ExtractionStatus.FAILED: "Text extraction for this {document} failed.",
    ExtractionStatus.COMPLETED: "No text could be extracted from this {document}.",
}


def _paper_header(paper: Paper) -> str:
    return (
        f"Exam Paper: {paper.title or 'Untitled'}\n"
        f"Year: {paper.year if paper.year is not None else 'Unknown'}\n"
        f"Paper Number: {paper.paper_number or 'Unknown'}"
    )


def _preamble(paper: Paper, document: str) -> str:
    note = STATUS_NOTES[paper.text_extraction_status].format(document=document)
    return (
        f"{_paper_header(paper)}\n\n"
        f"{note}\n"
        "Please provide your best educational guidance based on the question asked "
        "and general exam principles."
    )


def build_paper_context(paper: Paper) -> PaperContext:
    """Extracted texts for the chat request, or a status preamble where text is missing"""
    return PaperContext(
        paper_id=paper.id,
        status=paper.text_extraction_status,
        extracted_at=paper.text_extracted_at,
        error=paper.extraction_error,
        paper_content=paper.paper_extracted_text or _preamble(paper, "exam paper"),
        marking_scheme_content=paper.marking_scheme_extracted_text or _preamble(paper, "marking scheme"),
    )
