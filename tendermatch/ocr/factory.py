from tendermatch.config.settings import Settings
from tendermatch.ocr.base import BaseOcrAdapter, BasePageCounter
from tendermatch.ocr.llmwhisperer_adapter import LlmWhispererAdapter
from tendermatch.ocr.pdfplumber_adapter import PdfPlumberAdapter
from tendermatch.ocr.pymupdf_adapter import PyMuPdfAdapter


class PageCounterFactory:
    """Creates the local PDF engine used for page counting."""

    ADAPTERS: dict[str, type[PdfPlumberAdapter] | type[PyMuPdfAdapter]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePageCounter:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()


class OcrAdapterFactory:
    """Creates the correct OCR adapter based on settings."""

    ENGINES = ("llmwhisperer", *PageCounterFactory.ADAPTERS)

    @classmethod
    def create(cls, settings: Settings) -> BaseOcrAdapter:
        engine = settings.ocr_engine.lower()
        if engine == "llmwhisperer":
            return LlmWhispererAdapter(
                base_url=settings.llmwhisperer_base_url,
                api_key=settings.llmwhisperer_api_key,
                timeout_seconds=settings.ocr_timeout_seconds,
                mode=settings.llmwhisperer_mode,
                output_mode=settings.llmwhisperer_output_mode,
                poll_interval_seconds=settings.llmwhisperer_poll_interval_seconds,
                max_polls=settings.llmwhisperer_max_polls,
            )
        adapter_cls = PageCounterFactory.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown OCR engine '{engine}'. Choose from: {list(cls.ENGINES)}"
            )
        return adapter_cls()
