from docworker.config.settings import Settings
from docworker.extraction.base import BasePdfExtractor, BaseTextExtractor
from docworker.extraction.ocr_extractor import OcrExtractor
from docworker.extraction.pdfplumber_adapter import PdfPlumberAdapter
from docworker.extraction.pymupdf_adapter import PyMuPdfAdapter
from docworker.extraction.tesseract_ocr import TesseractOcr


class PdfExtractorFactory:
    """Creates the correct PDF extractor based on settings."""

    ADAPTERS: dict[str, type[BasePdfExtractor]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfExtractor:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()


class TextExtractorFactory:
    """Creates the OCR / extraction backend used for OCR-required files."""

    @classmethod
    def create(cls, settings: Settings) -> BaseTextExtractor:
        ocr = TesseractOcr(
            languages=settings.ocr_languages,
            dpi=settings.ocr_dpi,
            tesseract_cmd=settings.tesseract_cmd,
        )
        return OcrExtractor(
            pdf_extractor=PdfExtractorFactory.create(settings),
            ocr=ocr,
            min_chars_per_page=settings.pdf_ocr_min_chars_per_page,
        )
