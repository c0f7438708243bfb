"""
PDF Text Service
Extracts text from in-memory PDF bytes using pdfminer.six with a PyPDF2 fallback
"""
import logging
from io import BytesIO, StringIO
from typing import Optional

import PyPDF2
from pdfminer.high_level import extract_text_to_fp
from pdfminer.layout import LAParams
from pdfminer.pdfinterp import PDFResourceManager, PDFPageInterpreter
from pdfminer.converter import TextConverter
from pdfminer.pdfpage import PDFPage

from examprep.exceptions import PdfExtractionError

logger = logging.getLogger(__name__)

PDF_HEADER = b"%PDF-"


class PdfTextExtractor:
    """Converts PDF bytes to plain text"""

    def __init__(self, max_pages: Optional[int] = None):
        self.max_pages = max_pages

    def extract(self, data: bytes) -> str:
        """
        Extract text from a PDF held in memory

        Args:
            data: Raw PDF bytes

        Returns:
            Stripped text, empty when the PDF has no text layer

        Raises:
            PdfExtractionError: If the bytes are not a parseable PDF
        """
        if not data or data.lstrip()[:5] != PDF_HEADER:
            raise PdfExtractionError("File is not a PDF document")

        errors = []
        for method in (self._extract_high_level, self._extract_tuned, self._extract_pypdf):
            try:
                text = method(data)
            except Exception as e:
                logger.warning("%s failed: %s", method.__name__, e)
                errors.append(f"{method.__name__}: {e}")
                continue

            if text and text.strip():
                logger.info("Extracted %d characters with %s", len(text.strip()), method.__name__)
                return text.strip()

        if len(errors) == 3:
            raise PdfExtractionError(f"Could not parse PDF ({'; '.join(errors)})")

        logger.warning("No text layer found in PDF")
        return ""

    def _extract_high_level(self, data: bytes) -> str:
        output_string = StringIO()
        extract_text_to_fp(
            BytesIO(data),
            output_string,
            maxpages=self.max_pages or 0,
            laparams=LAParams(),
        )
        return output_string.getvalue()

    def _extract_tuned(self, data: bytes) -> str:
        output_string = StringIO()

        # Looser grouping picks up text that default LAParams drops
        laparams = LAParams(
            line_overlap=0.5,
            char_margin=2.0,
            line_margin=0.5,
            word_margin=0.1,
            boxes_flow=0.5,
            detect_vertical=True,
            all_texts=False,
        )

        rsrcmgr = PDFResourceManager()
        device = TextConverter(rsrcmgr, output_string, laparams=laparams)
        try:
            interpreter = PDFPageInterpreter(rsrcmgr, device)
            for page_count, page in enumerate(PDFPage.get_pages(BytesIO(data), check_extractable=False)):
                if self.max_pages and page_count >= self.max_pages:
                    break
                interpreter.process_page(page)
        finally:
            device.close()

        return output_string.getvalue()

    def _extract_pypdf(self, data: bytes) -> str:
        reader = PyPDF2.PdfReader(BytesIO(data))
        pages = list(reader.pages)
        if self.max_pages:
            pages = pages[: self.max_pages]
        return "\n".join(page.extract_text() or "" for page in pages)
