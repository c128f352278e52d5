import pytest

from tendermatch.ocr.exceptions import PdfExtractionError
from tendermatch.ocr.pymupdf_adapter import PyMuPdfAdapter


class TestPyMuPdfAdapter:
    def test_extract_returns_text(self, sample_pdf_bytes: bytes) -> None:
        result = PyMuPdfAdapter().extract(sample_pdf_bytes)
        assert "Hello PDF World" in result
        assert result == result.strip()

    def test_counts_pages(self, company_pdf_bytes: bytes) -> None:
        assert PyMuPdfAdapter().count_pages(company_pdf_bytes) == 2

    def test_extract_raises_on_invalid_bytes(self) -> None:
        with pytest.raises(PdfExtractionError):
            PyMuPdfAdapter().extract(b"not a pdf")

    def test_count_raises_on_invalid_bytes(self) -> None:
        with pytest.raises(PdfExtractionError):
            PyMuPdfAdapter().count_pages(b"not a pdf")
