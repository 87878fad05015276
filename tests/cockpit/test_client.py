"""Unit tests for cockpit.client — Ollama and Gemini backends with HTTP mocked out."""
from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import pytest
import requests

from cockpit.client import GeminiClient, OllamaClient, create_client
from cockpit.errors import ModelServiceError
from cockpit.schema import STEP_SCHEMA


def _ollama_response(content: str) -> MagicMock:
    resp = MagicMock()
    resp.raise_for_status.return_value = None
    resp.json.return_value = {"message": {"role": "assistant", "content": content}}
    return resp


def _gemini_response(text: str, status: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.is_success = 200 <= status < 300
    resp.status_code = status
    resp.text = "server error" if status >= 300 else ""
    resp.json.return_value = {
        "candidates": [{"content": {"parts": [{"text": text}]}}],
    }
    return resp


@pytest.mark.unit
class TestOllamaClient:

    @patch("cockpit.client.requests.post")
    def test_generate_returns_message_content(self, mock_post):
        mock_post.return_value = _ollama_response('{"status": "active"}')
        client = OllamaClient(host="http://gpu:11434/", model="gemma3:4b")

        text = client.generate("SYSTEM", "PROMPT", STEP_SCHEMA)

        assert text == '{"status": "active"}'
        url = mock_post.call_args[0][0]
        body = mock_post.call_args[1]["json"]
        assert url == "http://gpu:11434/api/chat"
        assert body["model"] == "gemma3:4b"
        assert body["stream"] is False
        assert body["format"] == STEP_SCHEMA
        assert body["messages"] == [
            {"role": "system", "content": "SYSTEM"},
            {"role": "user", "content": "PROMPT"},
        ]

    @patch("cockpit.client.requests.post")
    def test_timeout_passed_through(self, mock_post):
        mock_post.return_value = _ollama_response("{}")
        OllamaClient(timeout=7.5).generate("s", "p", {})
        assert mock_post.call_args[1]["timeout"] == 7.5

    @patch("cockpit.client.requests.post")
    def test_connection_error_raises_service_error(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("refused")
        with pytest.raises(ModelServiceError, match="refused"):
            OllamaClient().generate("s", "p", {})

    @patch("cockpit.client.requests.post")
    def test_http_error_raises_service_error(self, mock_post):
        resp = MagicMock()
        resp.raise_for_status.side_effect = requests.HTTPError("404 model not found")
        mock_post.return_value = resp
        with pytest.raises(ModelServiceError):
            OllamaClient().generate("s", "p", {})

    @patch("cockpit.client.requests.post")
    def test_non_json_body_raises_service_error(self, mock_post):
        resp = MagicMock()
        resp.raise_for_status.return_value = None
        resp.json.side_effect = ValueError("not json")
        mock_post.return_value = resp
        with pytest.raises(ModelServiceError):
            OllamaClient().generate("s", "p", {})

    @patch("cockpit.client.requests.get")
    def test_list_models(self, mock_get):
        mock_get.return_value = MagicMock(status_code=200)
        mock_get.return_value.json.return_value = {"models": [{"name": "gemma3:4b"}, {"name": "qwen2.5:7b"}]}
        assert OllamaClient().list_models() == ["gemma3:4b", "qwen2.5:7b"]

    @patch("cockpit.client.requests.get")
    def test_list_models_unreachable(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("down")
        assert OllamaClient().list_models() == []


@pytest.mark.unit
class TestGeminiClient:

    def test_requires_api_key(self):
        with pytest.raises(ModelServiceError):
            GeminiClient(api_key="")

    @patch("cockpit.client.httpx.post")
    def test_generate_request_shape(self, mock_post):
        mock_post.return_value = _gemini_response('{"status": "resolved"}')
        client = GeminiClient(api_key="k-123", model="gemini-2.5-flash", base_url="https://example.test/v1beta/")

        text = client.generate("SYSTEM", "PROMPT", STEP_SCHEMA)

        assert text == '{"status": "resolved"}'
        url = mock_post.call_args[0][0]
        kwargs = mock_post.call_args[1]
        assert url == "https://example.test/v1beta/models/gemini-2.5-flash:generateContent"
        assert kwargs["headers"] == {"x-goog-api-key": "k-123"}
        body = kwargs["json"]
        assert body["systemInstruction"] == {"parts": [{"text": "SYSTEM"}]}
        assert body["contents"] == [{"role": "user", "parts": [{"text": "PROMPT"}]}]
        config = body["generationConfig"]
        assert config["responseMimeType"] == "application/json"
        assert config["responseSchema"]["type"] == "OBJECT"

    @patch("cockpit.client.httpx.post")
    def test_http_status_error(self, mock_post):
        mock_post.return_value = _gemini_response("", status=500)
        with pytest.raises(ModelServiceError, match="HTTP 500"):
            GeminiClient(api_key="k").generate("s", "p", {})

    @patch("cockpit.client.httpx.post")
    def test_transport_error(self, mock_post):
        mock_post.side_effect = httpx.ConnectError("no route")
        with pytest.raises(ModelServiceError):
            GeminiClient(api_key="k").generate("s", "p", {})

    def test_extract_text_joins_parts(self):
        data = {"candidates": [{"content": {"parts": [{"text": '{"a":'}, {"text": " 1}"}]}}]}
        assert GeminiClient._extract_text(data) == '{"a": 1}'

    def test_extract_text_no_candidates(self):
        assert GeminiClient._extract_text({}) == ""

    def test_list_models_is_configured_model(self):
        assert GeminiClient(api_key="k", model="gemini-2.5-pro").list_models() == ["gemini-2.5-pro"]


@pytest.mark.unit
class TestCreateClient:

    def _settings(self, **overrides):
        base = dict(
            model_backend="ollama",
            model_timeout=30.0,
            ollama_host="http://localhost:11434",
            ollama_model="gemma3:4b",
            gemini_api_key="",
            gemini_model="gemini-2.5-flash",
            gemini_base_url="https://generativelanguage.googleapis.com/v1beta",
        )
        base.update(overrides)
        return SimpleNamespace(**base)

    def test_ollama_backend(self):
        client = create_client(self._settings())
        assert isinstance(client, OllamaClient)
        assert client.timeout == 30.0

    def test_gemini_backend(self):
        client = create_client(self._settings(model_backend="Gemini", gemini_api_key="k"))
        assert isinstance(client, GeminiClient)

    def test_gemini_without_key_fails(self):
        with pytest.raises(ModelServiceError):
            create_client(self._settings(model_backend="gemini"))

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_client(self._settings(model_backend="openai"))
