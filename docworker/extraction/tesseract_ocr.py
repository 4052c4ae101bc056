"""Tesseract OCR over images and rendered PDF pages."""

import io

import pymupdf
import pytesseract
from PIL import Image

from docworker.logging.logger import Log
from docworker.processor.exceptions import ExtractionError


class TesseractOcr:
    """Runs Tesseract via pytesseract. Pages are rendered with PyMuPDF."""

    def __init__(
        self,
        *,
        languages: str = "vie+eng",
        dpi: int = 300,
        tesseract_cmd: str = "",
        psm_mode: int = 3,
    ) -> None:
        self._languages = languages
        self._dpi = dpi
        self._psm_mode = psm_mode
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    def image_to_text(self, image_bytes: bytes) -> str:
        try:
            with Image.open(io.BytesIO(image_bytes)) as image:
                text = self._ocr(image)
        except ExtractionError:
            raise
        except Exception as exc:
            raise ExtractionError(f"Image OCR failed: {exc}") from exc
        return text.strip()

    def pdf_to_text(self, pdf_bytes: bytes) -> str:
        """OCR every page of a (scanned) PDF, pages in order."""
        try:
            pages: list[str] = []
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                for page in doc:
                    pix = page.get_pixmap(dpi=self._dpi)
                    with Image.open(io.BytesIO(pix.tobytes("png"))) as image:
                        pages.append(self._ocr(image).strip())
        except ExtractionError:
            raise
        except Exception as exc:
            raise ExtractionError(f"PDF OCR failed: {exc}") from exc
        Log.debug(f"OCR processed {len(pages)} PDF pages")
        return "\n\n".join(p for p in pages if p)

    def _ocr(self, image: Image.Image) -> str:
        return str(
            pytesseract.image_to_string(
                image,
                lang=self._languages,
                config=f"--psm {self._psm_mode}",
            )
        )
