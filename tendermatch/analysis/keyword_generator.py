"""Bilingual (English/Arabic) keyword generation for tender matching."""

from pathlib import Path

from tendermatch.analysis.base import BaseAnalysisClient, BaseKeywordGenerator
from tendermatch.analysis.exceptions import AnalysisError, KeywordGenerationError
from tendermatch.analysis.prompt_loader import load_prompt_bundle
from tendermatch.analysis.validator import parse_json_object, validate_keywords
from tendermatch.logging.logger import Log
from tendermatch.processor.models import KeywordPair

DEFAULT_SYSTEM_PROMPT = (
    "You are an AI that generates bilingual keywords for company profiles. "
    "Generate keywords in both Arabic and English to match companies with "
    "government tenders in Saudi Arabia."
)

MAX_DESCRIPTION_CHARS = 4000


class KeywordGenerator(BaseKeywordGenerator):
    """Generates bilingual keyword pairs from company narrative text."""

    SCHEMA_NAME = "bilingual_keywords"

    def __init__(
        self,
        *,
        client: BaseAnalysisClient,
        model: str,
        temperature: float = 0.2,
        max_keywords: int = 15,
        prompt_template_path: Path | None = None,
        json_schema_path: Path | None = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))
        self._max_keywords = max_keywords
        self._system_prompt = system_prompt
        prompts = load_prompt_bundle("keywords", prompt_template_path, json_schema_path)
        self._prompt_template = prompts.template
        self._json_schema = prompts.schema_text
        self._json_schema_dict = prompts.schema

    def generate(
        self,
        text: str,
        industries: list[str],
        specializations: list[str],
    ) -> list[KeywordPair]:
        prompt = self._prompt_template.format(
            description=text[:MAX_DESCRIPTION_CHARS],
            industries=", ".join(industries),
            specializations=", ".join(specializations),
            json_schema=self._json_schema,
        )
        Log.debug(f"Keyword generation prompt:\n{prompt}")

        try:
            raw_response = self._client.create_chat_completion(
                model=self._model,
                temperature=self._temperature,
                system_prompt=self._system_prompt,
                user_prompt=prompt,
                json_schema=self._json_schema_dict,
                schema_name=self.SCHEMA_NAME,
            )
            Log.debug(f"AI raw response:\n{raw_response}")
            keywords = validate_keywords(parse_json_object(raw_response), self._max_keywords)
        except KeywordGenerationError:
            raise
        except AnalysisError as exc:
            raise KeywordGenerationError(f"Keyword generation failed: {exc}") from exc

        Log.info(f"Keyword generation complete: {len(keywords)} keywords")
        return keywords
