import io

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas


def build_pdf(pages: list[str]) -> bytes:
    """Render one line of text per page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for text in pages:
        if text:
            c.drawString(72, 720, text)
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    return build_pdf(["Hello PDF World"])


@pytest.fixture()
def company_pdf_bytes() -> bytes:
    """Generate a two-page company profile PDF."""
    return build_pdf(
        [
            "Acme Systems LLC provides software development for government entities.",
            "Services include IT consulting and network infrastructure.",
        ]
    )


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    return build_pdf([""])


@pytest.fixture()
def oversized_page_count_pdf_bytes() -> bytes:
    """Generate a 101-page PDF."""
    return build_pdf([f"Page {i}" for i in range(1, 102)])
