from abc import ABC, abstractmethod


class BasePdfExtractor(ABC):
    """Contract for all PDF text-layer extraction adapters."""

    @abstractmethod
    def extract(self, pdf_bytes: bytes) -> str:
        """Extract plain text from PDF bytes.

        Args:
            pdf_bytes: Raw PDF file content.

        Returns:
            Extracted text as a single string, pages joined by newlines.

        Raises:
            ExtractionError: if extraction fails for any reason.
        """

    def page_count(self, pdf_bytes: bytes) -> int:
        """Number of pages, or 0 when unknown."""
        return 0


class BaseTextExtractor(ABC):
    """Contract for the OCR / extraction backend called by the pipeline."""

    @abstractmethod
    def extract(self, data: bytes, file_type: str) -> str:
        """Turn a document that requires OCR into text.

        Raises:
            ExtractionError: on any backend failure.
        """
