import io

import pdfplumber

from docworker.extraction.base import BasePdfExtractor
from docworker.processor.exceptions import ExtractionError


class PdfPlumberAdapter(BasePdfExtractor):
    """Extracts text from PDF using pdfplumber."""

    def extract(self, pdf_bytes: bytes) -> str:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
            return "\n".join(pages).strip()
        except ExtractionError:
            raise
        except Exception as exc:
            raise ExtractionError(f"pdfplumber extraction failed: {exc}") from exc

    def page_count(self, pdf_bytes: bytes) -> int:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                return len(pdf.pages)
        except Exception as exc:
            raise ExtractionError(f"pdfplumber could not open document: {exc}") from exc
