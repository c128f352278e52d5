import json
from unittest.mock import MagicMock

import pytest

from tendermatch.analysis.exceptions import AnalysisNetworkError, KeywordGenerationError
from tendermatch.analysis.keyword_generator import KeywordGenerator
from tendermatch.processor.models import KeywordPair


def _make_generator(client: MagicMock, max_keywords: int = 15) -> KeywordGenerator:
    return KeywordGenerator(client=client, model="test-model", max_keywords=max_keywords)


def _keywords_response(count: int) -> str:
    return json.dumps({
        "keywords": [{"en": f"term {i}", "ar": f"مصطلح {i}"} for i in range(count)]
    })


class TestGenerate:
    def test_returns_keyword_pairs(self) -> None:
        client = MagicMock()
        client.create_chat_completion.return_value = _keywords_response(2)

        result = _make_generator(client).generate("We build software", [], [])

        assert result == [
            KeywordPair(source="term 0", target="مصطلح 0"),
            KeywordPair(source="term 1", target="مصطلح 1"),
        ]

    def test_prompt_contains_context(self) -> None:
        client = MagicMock()
        client.create_chat_completion.return_value = _keywords_response(1)

        _make_generator(client).generate("We build software", ["IT", "Telecom"], ["Cloud"])

        user_msg = client.create_chat_completion.call_args.kwargs["user_prompt"]
        assert "We build software" in user_msg
        assert "IT, Telecom" in user_msg
        assert "Cloud" in user_msg

    def test_uses_keyword_schema(self) -> None:
        client = MagicMock()
        client.create_chat_completion.return_value = _keywords_response(1)

        _make_generator(client).generate("text", [], [])

        assert client.create_chat_completion.call_args.kwargs["schema_name"] == "bilingual_keywords"

    def test_caps_result_count(self) -> None:
        client = MagicMock()
        client.create_chat_completion.return_value = _keywords_response(20)

        result = _make_generator(client, max_keywords=5).generate("text", [], [])

        assert len(result) == 5

    def test_empty_list_is_valid(self) -> None:
        client = MagicMock()
        client.create_chat_completion.return_value = '{"keywords": []}'

        assert _make_generator(client).generate("text", [], []) == []


class TestGenerateFailures:
    def test_provider_error_is_wrapped(self) -> None:
        client = MagicMock()
        client.create_chat_completion.side_effect = AnalysisNetworkError("timeout")

        with pytest.raises(KeywordGenerationError, match="Keyword generation failed"):
            _make_generator(client).generate("text", [], [])

    def test_invalid_response_is_wrapped(self) -> None:
        client = MagicMock()
        client.create_chat_completion.return_value = "garbage"

        with pytest.raises(KeywordGenerationError):
            _make_generator(client).generate("text", [], [])

    def test_unexpected_errors_propagate_unchanged(self) -> None:
        client = MagicMock()
        client.create_chat_completion.side_effect = RuntimeError("bug")

        with pytest.raises(RuntimeError):
            _make_generator(client).generate("text", [], [])
