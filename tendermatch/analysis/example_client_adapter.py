"""Example analysis client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseAnalysisClient and register the provider in AnalysisFactory.
"""

import json
from typing import ClassVar

from tendermatch.analysis.base import BaseAnalysisClient


class ExampleClientAdapter(BaseAnalysisClient):
    """Example adapter that returns fixed valid analysis JSON per schema.

    No network calls. Useful for local development, tests, and as a template
    for building real provider adapters (OpenAI, Anthropic, etc.).
    """

    RESPONSES: ClassVar[dict[str, dict[str, object]]] = {
        "company_profile": {
            "description": "Example company providing IT services to government entities.",
            "business_type": "LLC",
            "activities": ["Software development", "IT consulting"],
            "industries": ["Information Technology"],
            "specializations": ["Government IT systems"],
        },
        "bilingual_keywords": {
            "keywords": [
                {"en": "software development", "ar": "تطوير البرمجيات"},
                {"en": "IT consulting", "ar": "استشارات تقنية المعلومات"},
            ],
        },
    }

    def __init__(self) -> None:
        pass

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
        _ = model, temperature, system_prompt, user_prompt, json_schema
        return json.dumps(self.RESPONSES.get(schema_name, {}), ensure_ascii=False)
