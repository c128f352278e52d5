"""AI-powered company profile field extractor."""

from pathlib import Path

from tendermatch.analysis.base import BaseAnalysisClient, BaseProfileExtractor
from tendermatch.analysis.prompt_loader import load_prompt_bundle
from tendermatch.analysis.validator import parse_json_object, validate_profile_fields
from tendermatch.logging.logger import Log
from tendermatch.processor.models import ExtractedFields

MAX_INPUT_CHARS = 15000

DEFAULT_SYSTEM_PROMPT = (
    "You are a business analyst expert who extracts structured information "
    "from company documents."
)


class ProfileExtractor(BaseProfileExtractor):
    """Extracts structured company profile fields from OCR text using an AI provider."""

    SCHEMA_NAME = "company_profile"

    def __init__(
        self,
        *,
        client: BaseAnalysisClient,
        model: str,
        temperature: float = 0.2,
        prompt_template_path: Path | None = None,
        json_schema_path: Path | None = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))
        self._system_prompt = system_prompt
        prompts = load_prompt_bundle("profile", prompt_template_path, json_schema_path)
        self._prompt_template = prompts.template
        self._json_schema = prompts.schema_text
        self._json_schema_dict = prompts.schema

    def extract(self, text: str, company_name: str | None = None) -> ExtractedFields:
        """Transform OCR text into structured profile fields."""
        prompt = self._build_prompt(text, company_name)
        Log.debug(f"Profile extraction prompt:\n{prompt}")

        raw_response = self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt=self._system_prompt,
            user_prompt=prompt,
            json_schema=self._json_schema_dict,
            schema_name=self.SCHEMA_NAME,
        )
        Log.debug(f"AI raw response:\n{raw_response}")

        fields = validate_profile_fields(parse_json_object(raw_response))
        Log.info(
            f"Profile extraction complete: {len(fields.activities)} activities, "
            f"{len(fields.industries)} industries, "
            f"{len(fields.specializations)} specializations"
        )
        return fields

    def _build_prompt(self, text: str, company_name: str | None) -> str:
        truncated = text[:MAX_INPUT_CHARS]
        if len(text) > MAX_INPUT_CHARS:
            truncated += "..."
        return self._prompt_template.format(
            company_name=company_name or "Unknown",
            document_text=truncated,
            json_schema=self._json_schema,
        )
