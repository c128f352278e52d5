from tendermatch.processor.exceptions import AdapterError, AdapterTimeoutError


class OcrError(AdapterError):
    """Raised when OCR extraction fails."""


class PdfExtractionError(OcrError):
    """Raised when a local PDF engine cannot read the document."""


class OcrNetworkError(OcrError):
    """Raised when the OCR provider call fails due to network/infrastructure issues."""


class OcrTimeoutError(OcrError, AdapterTimeoutError):
    """Raised when the OCR provider does not finish within its polling budget."""
