"""OCR adapter for the LLMWhisperer v2 API.

The provider is call-and-poll: the document is submitted, a whisper hash is
returned, the status endpoint is polled until the text is ready, then the
text is retrieved.
"""

import time
from collections.abc import Callable
from typing import Any

import httpx

from tendermatch.logging.logger import Log
from tendermatch.ocr.base import BaseOcrAdapter
from tendermatch.ocr.exceptions import OcrError, OcrNetworkError, OcrTimeoutError


class LlmWhispererAdapter(BaseOcrAdapter):
    """Extracts layout-preserving text from a PDF through LLMWhisperer."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        timeout_seconds: float = 30.0,
        mode: str = "form",
        output_mode: str = "layout_preserving",
        poll_interval_seconds: float = 6.0,
        max_polls: int = 20,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client or httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout_seconds,
            headers={"unstract-key": api_key},
        )
        self._mode = mode
        self._output_mode = output_mode
        self._poll_interval_seconds = poll_interval_seconds
        self._max_polls = max_polls
        self._sleep = sleep

    def extract(self, pdf_bytes: bytes) -> str:
        whisper_hash = self._submit(pdf_bytes)
        Log.info(f"LLMWhisperer accepted document, whisper_hash={whisper_hash}")
        self._wait_until_processed(whisper_hash)
        return self._retrieve(whisper_hash)

    def _submit(self, pdf_bytes: bytes) -> str:
        payload = self._request(
            "POST",
            "/whisper",
            params={"mode": self._mode, "output_mode": self._output_mode},
            content=pdf_bytes,
            headers={"Content-Type": "application/octet-stream"},
        )
        whisper_hash = payload.get("whisper_hash")
        if payload.get("status") != "processing" or not whisper_hash:
            raise OcrError("Invalid response from LLMWhisperer API")
        return str(whisper_hash)

    def _wait_until_processed(self, whisper_hash: str) -> None:
        for attempt in range(1, self._max_polls + 1):
            self._sleep(self._poll_interval_seconds)
            payload = self._request(
                "GET", "/whisper-status", params={"whisper_hash": whisper_hash}
            )
            status = payload.get("status")
            Log.debug(f"LLMWhisperer status poll {attempt}: {status}")
            if status == "processed":
                return
            if status in ("error", "failed"):
                message = payload.get("message") or "Unknown error"
                raise OcrError(f"Document processing failed: {message}")
        raise OcrTimeoutError("Document processing timed out")

    def _retrieve(self, whisper_hash: str) -> str:
        payload = self._request(
            "GET", "/whisper-retrieve", params={"whisper_hash": whisper_hash}
        )
        text = payload.get("result_text")
        if not text:
            raise OcrError("No text content returned from LLMWhisperer API")
        return str(text).strip()

    def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise OcrTimeoutError(f"OCR provider timed out: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            raise OcrNetworkError(
                f"OCR provider API error: {exc.response.status_code} {exc.response.reason_phrase}"
            ) from exc
        except httpx.HTTPError as exc:
            raise OcrNetworkError(f"OCR provider network error: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise OcrError(f"Invalid JSON from OCR provider: {exc}") from exc
        if not isinstance(payload, dict):
            raise OcrError("OCR provider response must be an object")
        return payload
