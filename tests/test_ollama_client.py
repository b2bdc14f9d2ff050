"""Tests for the Ollama reason hint client (HTTP calls are mocked)."""

from unittest.mock import MagicMock, patch

import requests

from exchange_bounce_analyzer.modules.body_parser import DeliveryStatus
from exchange_bounce_analyzer.modules.ollama_client import OllamaClient, _parse_response

_MODULE = "exchange_bounce_analyzer.modules.ollama_client.requests"


def _response(payload):
    resp = MagicMock()
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


def _record(diagnosis="The recipient name is not recognized"):
    return DeliveryStatus(recipient="kijitora@example.co.jp", diagnosis=diagnosis, rhost="mx.example.co.jp")


class TestParseResponse:
    def test_valid_reason(self):
        result = _parse_response("REASON: userunknown\nCOMMENT: Mailbox does not exist")
        assert result == {"reason": "userunknown", "comment": "Mailbox does not exist"}

    def test_reason_is_lower_cased(self):
        assert _parse_response("REASON: Filtered\nCOMMENT: x")["reason"] == "filtered"

    def test_none_answer(self):
        result = _parse_response("REASON: none\nCOMMENT: Not enough information")
        assert result == {"reason": "", "comment": "Not enough information"}

    def test_unknown_reason(self):
        assert _parse_response("REASON: mailboxfull\nCOMMENT: Full")["reason"] == ""

    def test_garbage(self):
        assert _parse_response("I cannot help with that") == {"reason": "", "comment": "Suggestion unavailable"}


class TestSuggestReason:
    def test_posts_prompt_and_parses_answer(self):
        client = OllamaClient("http://ollama.local:11434/", "gemma3:4b")
        with patch(f"{_MODULE}.post", return_value=_response({"response": "REASON: userunknown\nCOMMENT: x"})) as post:
            result = client.suggest_reason(_record())

        assert result["reason"] == "userunknown"
        args, kwargs = post.call_args
        assert args[0] == "http://ollama.local:11434/api/generate"
        assert kwargs["json"]["model"] == "gemma3:4b"
        assert kwargs["json"]["stream"] is False
        assert "The recipient name is not recognized" in kwargs["json"]["prompt"]
        assert "- userunknown : " in kwargs["json"]["prompt"]

    def test_request_failure(self):
        client = OllamaClient("http://ollama.local:11434", "gemma3:4b")
        with patch(f"{_MODULE}.post", side_effect=requests.ConnectionError("refused")):
            result = client.suggest_reason(_record())
        assert result["reason"] == ""

    def test_empty_diagnosis_skips_request(self):
        client = OllamaClient("http://ollama.local:11434", "gemma3:4b")
        with patch(f"{_MODULE}.post") as post:
            result = client.suggest_reason(_record(diagnosis=""))
        post.assert_not_called()
        assert result["reason"] == ""


class TestConnection:
    def test_model_available(self):
        client = OllamaClient("http://ollama.local:11434", "gemma3:4b")
        with patch(f"{_MODULE}.get", return_value=_response({"models": [{"name": "gemma3:4b"}]})):
            assert client.test_connection() is True

    def test_model_missing(self):
        client = OllamaClient("http://ollama.local:11434", "gemma3:4b")
        with patch(f"{_MODULE}.get", return_value=_response({"models": [{"name": "llama3:8b"}]})):
            assert client.test_connection() is False

    def test_server_down(self):
        client = OllamaClient("http://ollama.local:11434", "gemma3:4b")
        with patch(f"{_MODULE}.get", side_effect=requests.Timeout("slow")):
            assert client.test_connection() is False
