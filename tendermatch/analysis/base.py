from abc import ABC, abstractmethod

from tendermatch.processor.models import ExtractedFields, KeywordPair


class BaseAnalysisClient(ABC):
    """Contract for the provider that answers a prompt with schema-shaped JSON text.

    One client is shared by profile extraction and keyword generation.
    """

    @abstractmethod
    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object],
        schema_name: str,
    ) -> str:
        """Return the raw response text. schema_name labels the JSON schema for the provider.

        Raises:
            AnalysisError: on any provider failure.
        """


class BaseProfileExtractor(ABC):
    """Contract for structured company-field extraction over OCR text."""

    @abstractmethod
    def extract(self, text: str, company_name: str | None = None) -> ExtractedFields:
        """Turn OCR text of a company document into structured profile fields.

        Args:
            text: Plain text produced by the OCR stage.
            company_name: Optional company name to give the model context.

        Returns:
            ExtractedFields without keywords.

        Raises:
            AnalysisError: on any failure.
        """


class BaseKeywordGenerator(ABC):
    """Contract for bilingual keyword generation."""

    @abstractmethod
    def generate(
        self,
        text: str,
        industries: list[str],
        specializations: list[str],
    ) -> list[KeywordPair]:
        """Produce bilingual keyword pairs describing the company.

        An empty list is a valid result, distinct from a failure.

        Raises:
            KeywordGenerationError: when the provider call fails.
        """
