from abc import ABC, abstractmethod


class BaseOcrAdapter(ABC):
    """Contract for all document-to-text extraction adapters."""

    @abstractmethod
    def extract(self, pdf_bytes: bytes) -> str:
        """Extract plain text from PDF bytes.

        Args:
            pdf_bytes: Raw PDF file content.

        Returns:
            Extracted text as a single normalized string.

        Raises:
            OcrError: if extraction fails for any reason.
        """


class BasePageCounter(ABC):
    """Contract for adapters able to count the pages of a PDF."""

    @abstractmethod
    def count_pages(self, pdf_bytes: bytes) -> int:
        """Return the number of pages in the PDF.

        Raises:
            PdfExtractionError: if the bytes are not a readable PDF.
        """
