"""Tests for the chat backends; no network calls are made."""

import asyncio
from unittest.mock import MagicMock, patch

import pytest
import requests

from litdesk.errors import BackendUnavailableError, ConfigurationError
from litdesk.services.llm_service import (
    OllamaBackend,
    OpenAIBackend,
    check_backend,
    create_backend,
)


def fake_response(status=200, payload=None, text=""):
    response = MagicMock()
    response.ok = 200 <= status < 300
    response.status_code = status
    response.text = text
    response.json.return_value = payload if payload is not None else {}
    return response


class TestOllamaBackend:

    @patch("litdesk.services.llm_service.requests.post")
    def test_request_shape(self, mock_post):
        mock_post.return_value = fake_response(payload={"message": {"content": "hi"}})
        backend = OllamaBackend("http://ollama:11434/", "llama3.1")

        assert backend.complete("Hello", temperature=0.1) == "hi"

        url = mock_post.call_args.args[0]
        payload = mock_post.call_args.kwargs["json"]
        assert url == "http://ollama:11434/api/chat"
        assert payload == {
            "model": "llama3.1",
            "messages": [{"role": "user", "content": "Hello"}],
            "stream": False,
            "options": {"temperature": 0.1},
        }
        assert "timeout" not in mock_post.call_args.kwargs

    @patch("litdesk.services.llm_service.requests.post")
    def test_json_mode_sets_format(self, mock_post):
        mock_post.return_value = fake_response(payload={"message": {"content": "{}"}})
        OllamaBackend("http://ollama:11434", "m").complete("x", json_mode=True)
        assert mock_post.call_args.kwargs["json"]["format"] == "json"

    @patch("litdesk.services.llm_service.requests.post")
    def test_missing_content_is_empty(self, mock_post):
        mock_post.return_value = fake_response(payload={"done": True})
        assert OllamaBackend("http://o", "m").complete("x") == ""

    @patch("litdesk.services.llm_service.requests.post")
    def test_non_2xx_carries_status_and_body(self, mock_post):
        mock_post.return_value = fake_response(status=404, text='{"error":"model not found"}')
        with pytest.raises(BackendUnavailableError) as exc_info:
            OllamaBackend("http://o", "m").complete("x")
        assert exc_info.value.status_code == 404
        assert "model not found" in exc_info.value.body
        assert "HTTP 404" in str(exc_info.value)

    @patch("litdesk.services.llm_service.requests.post")
    def test_connection_error(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("refused")
        with pytest.raises(BackendUnavailableError) as exc_info:
            OllamaBackend("http://o", "m").complete("x")
        assert exc_info.value.status_code is None


class TestOpenAIBackend:

    def test_requires_key(self):
        with pytest.raises(ConfigurationError):
            OpenAIBackend("gpt-4o-mini", "")

    @patch("openai.OpenAI")
    def test_request_shape(self, mock_openai):
        client = mock_openai.return_value
        choice = MagicMock()
        choice.message.content = "answer"
        client.chat.completions.create.return_value = MagicMock(choices=[choice])

        backend = OpenAIBackend("gpt-4o-mini", "sk-test")
        assert backend.complete("Hello", json_mode=True) == "answer"

        mock_openai.assert_called_once_with(api_key="sk-test")
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["messages"] == [{"role": "user", "content": "Hello"}]
        assert kwargs["temperature"] == 0.2
        assert kwargs["response_format"] == {"type": "json_object"}

    @patch("openai.OpenAI")
    def test_no_choices(self, mock_openai):
        mock_openai.return_value.chat.completions.create.return_value = MagicMock(choices=[])
        assert OpenAIBackend("m", "sk-test").complete("x") == ""

    @patch("openai.OpenAI")
    def test_sdk_error_mapped(self, mock_openai):
        import openai

        mock_openai.return_value.chat.completions.create.side_effect = openai.OpenAIError("boom")
        with pytest.raises(BackendUnavailableError):
            OpenAIBackend("m", "sk-test").complete("x")


class TestCreateBackend:

    def test_ollama_by_default(self, settings):
        backend = create_backend(settings)
        assert isinstance(backend, OllamaBackend)
        assert backend.model == settings.ollama_model

    @patch("openai.OpenAI")
    def test_openai_when_selected(self, mock_openai, settings):
        settings.update(use_ollama=False, openai_api_key="sk-test", openai_model="gpt-x")
        backend = create_backend(settings)
        assert isinstance(backend, OpenAIBackend)
        assert backend.model == "gpt-x"

    def test_openai_without_key(self, settings):
        settings.update(use_ollama=False, openai_api_key=None)
        with pytest.raises(ConfigurationError):
            create_backend(settings)


def test_check_backend_unreachable():
    result = asyncio.run(check_backend("http://127.0.0.1:1"))
    assert result == {"ok": False, "models": 0, "message": "Not reachable"}
