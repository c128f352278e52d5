from typing import Any

import httpx
import openai

from tendermatch.analysis.base import BaseAnalysisClient
from tendermatch.analysis.exceptions import (
    AnalysisError,
    AnalysisNetworkError,
    AnalysisTimeoutError,
)


class OpenAIClientAdapter(BaseAnalysisClient):
    """Chat-completions client for OpenAI and OpenAI-compatible providers.

    Responses are requested in strict JSON-schema mode, so the returned text
    is expected to be a single JSON object matching the given schema.
    """

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

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
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": schema_name,
                        "strict": True,
                        "schema": json_schema,
                    },
                },
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
        except (openai.APITimeoutError, httpx.TimeoutException) as exc:
            raise AnalysisTimeoutError(f"AI provider timed out ({schema_name}): {exc}") from exc
        except (openai.APIConnectionError, httpx.ConnectError) as exc:
            raise AnalysisNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise AnalysisNetworkError(f"AI provider API error: {exc}") from exc

        return _message_text(response)


def _message_text(response: Any) -> str:
    if not response.choices:
        raise AnalysisError("AI returned no choices")
    message = response.choices[0].message
    refusal = getattr(message, "refusal", None)
    if isinstance(refusal, str) and refusal:
        raise AnalysisError(f"AI refused the request: {refusal}")
    if message.content is None:
        raise AnalysisError("AI returned empty response")
    return str(message.content)
