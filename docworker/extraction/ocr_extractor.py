from typing import ClassVar

from docworker.extraction.base import BasePdfExtractor, BaseTextExtractor
from docworker.extraction.tesseract_ocr import TesseractOcr
from docworker.logging.logger import Log
from docworker.processor.exceptions import ExtractionError


class OcrExtractor(BaseTextExtractor):
    """Extracts text from OCR-required files.

    PDFs use their native text layer first and fall back to page OCR when the
    layer is thinner than ``min_chars_per_page`` (scanned documents). Images
    always go through Tesseract.
    """

    IMAGE_TYPES: ClassVar[frozenset[str]] = frozenset(
        {"png", "jpg", "jpeg", "tif", "tiff", "bmp", "gif", "webp"}
    )

    def __init__(
        self,
        pdf_extractor: BasePdfExtractor,
        ocr: TesseractOcr,
        min_chars_per_page: int = 20,
    ) -> None:
        self._pdf_extractor = pdf_extractor
        self._ocr = ocr
        self._min_chars_per_page = min_chars_per_page

    def extract(self, data: bytes, file_type: str) -> str:
        kind = file_type.lower().lstrip(".")
        if kind == "pdf":
            return self._extract_pdf(data)
        if kind in self.IMAGE_TYPES:
            return self._ocr.image_to_text(data)
        raise ExtractionError(f"No OCR backend for file type '{kind}'")

    def _extract_pdf(self, data: bytes) -> str:
        native = self._pdf_extractor.extract(data)
        pages = max(self._pdf_extractor.page_count(data), 1)
        if len(native) >= self._min_chars_per_page * pages:
            return native

        Log.info(
            f"PDF text layer too thin ({len(native)} chars / {pages} pages), running OCR"
        )
        ocr_text = self._ocr.pdf_to_text(data)
        return ocr_text if len(ocr_text) > len(native) else native
