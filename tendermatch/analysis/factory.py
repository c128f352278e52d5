from typing import ClassVar

from tendermatch.analysis.base import BaseAnalysisClient
from tendermatch.analysis.example_client_adapter import ExampleClientAdapter
from tendermatch.analysis.keyword_generator import KeywordGenerator
from tendermatch.analysis.openai_client_adapter import OpenAIClientAdapter
from tendermatch.analysis.profile_extractor import ProfileExtractor
from tendermatch.config.settings import Settings


class AnalysisFactory:
    """Creates the configured analysis client, profile extractor and keyword generator."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create_extractor(
        cls, settings: Settings, client: BaseAnalysisClient | None = None
    ) -> ProfileExtractor:
        provider = settings.analysis_provider.lower()
        return ProfileExtractor(
            client=client or cls.create_client(settings),
            model=cls._resolve_model_name(provider, settings),
            temperature=cls._resolve_temperature(provider, settings),
        )

    @classmethod
    def create_keyword_generator(
        cls, settings: Settings, client: BaseAnalysisClient | None = None
    ) -> KeywordGenerator:
        provider = settings.analysis_provider.lower()
        return KeywordGenerator(
            client=client or cls.create_client(settings),
            model=cls._resolve_model_name(provider, settings),
            temperature=cls._resolve_temperature(provider, settings),
            max_keywords=settings.keyword_max_count,
        )

    @classmethod
    def create_client(cls, settings: Settings) -> BaseAnalysisClient:
        """Create the provider client shared by extraction and keyword generation."""
        provider = settings.analysis_provider.lower()
        if provider == "example":
            return ExampleClientAdapter()
        return OpenAIClientAdapter(
            api_key=cls._resolve_api_key(provider, settings),
            timeout_seconds=cls._resolve_timeout_seconds(provider, settings),
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = (settings.analysis_openai_compatible_base_url or "").strip()
            if not url:
                raise ValueError(
                    "analysis_openai_compatible_base_url is required for "
                    "analysis_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(
            f"Unknown analysis provider '{provider}'. Choose from: {supported}"
        )

    @classmethod
    def _resolve_api_key(cls, provider: str, settings: Settings) -> str:
        key_map = {
            "openai": settings.analysis_openai_api_key,
            "openai_compatible": settings.analysis_openai_compatible_api_key,
            "openrouter": settings.analysis_openrouter_api_key,
            "groq": settings.analysis_groq_api_key,
            "together": settings.analysis_together_api_key,
            "deepseek": settings.analysis_deepseek_api_key,
            "ollama": settings.analysis_ollama_api_key,
        }
        return key_map.get(provider, "") or ""

    @classmethod
    def _resolve_model_name(cls, provider: str, settings: Settings) -> str:
        if provider == "example":
            return "example"
        key_map = {
            "openai": settings.analysis_openai_model_name,
            "openai_compatible": settings.analysis_openai_compatible_model_name,
            "openrouter": settings.analysis_openrouter_model_name,
            "groq": settings.analysis_groq_model_name,
            "together": settings.analysis_together_model_name,
            "deepseek": settings.analysis_deepseek_model_name,
            "ollama": settings.analysis_ollama_model_name,
        }
        return key_map.get(provider, "") or ""

    @classmethod
    def _resolve_timeout_seconds(cls, provider: str, settings: Settings) -> int:
        key_map = {
            "openai": settings.analysis_openai_timeout_seconds,
            "openai_compatible": settings.analysis_openai_compatible_timeout_seconds,
            "openrouter": settings.analysis_openrouter_timeout_seconds,
            "groq": settings.analysis_groq_timeout_seconds,
            "together": settings.analysis_together_timeout_seconds,
            "deepseek": settings.analysis_deepseek_timeout_seconds,
            "ollama": settings.analysis_ollama_timeout_seconds,
        }
        return key_map.get(provider, 30) or 30

    @classmethod
    def _resolve_temperature(cls, provider: str, settings: Settings) -> float:
        if provider == "openai":
            return settings.analysis_openai_temperature
        return 0.0
