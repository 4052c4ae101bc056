import pymupdf

from docworker.extraction.base import BasePdfExtractor
from docworker.processor.exceptions import ExtractionError


class PyMuPdfAdapter(BasePdfExtractor):
    """Extracts text from PDF using PyMuPDF."""

    def extract(self, pdf_bytes: bytes) -> str:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                pages = [page.get_text() for page in doc]
            return "\n".join(pages).strip()
        except ExtractionError:
            raise
        except Exception as exc:
            raise ExtractionError(f"pymupdf extraction failed: {exc}") from exc

    def page_count(self, pdf_bytes: bytes) -> int:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                return int(doc.page_count)
        except Exception as exc:
            raise ExtractionError(f"pymupdf could not open document: {exc}") from exc
