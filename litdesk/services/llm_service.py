"""Chat-completion backends: self-hosted Ollama or the OpenAI cloud API.

Both take a single user prompt and return the assistant text; neither
streams.  Failures surface as ``BackendUnavailableError`` carrying the HTTP
status and response body when there was one.
"""

import logging
from typing import Any, Optional, Protocol

import httpx
import requests

from litdesk.config import Settings
from litdesk.errors import BackendUnavailableError, ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.2
HEALTH_TIMEOUT = 5.0


class ChatBackend(Protocol):
    """Anything that turns one user prompt into assistant text."""

    name: str
    model: str

    def complete(
        self,
        prompt: str,
        *,
        temperature: float = DEFAULT_TEMPERATURE,
        json_mode: bool = False,
    ) -> str:
        ...


class OllamaBackend:
    """Self-hosted backend speaking Ollama's ``/api/chat``."""

    name = "ollama"

    def __init__(self, base_url: str, model: str):
        self.base_url = base_url.rstrip("/")
        self.model = model

    def complete(
        self,
        prompt: str,
        *,
        temperature: float = DEFAULT_TEMPERATURE,
        json_mode: bool = False,
    ) -> str:
        """POST one chat request and return ``message.content`` (``""`` if absent)."""
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "stream": False,
            "options": {"temperature": temperature},
        }
        if json_mode:
            payload["format"] = "json"

        try:
            response = requests.post(f"{self.base_url}/api/chat", json=payload)
        except requests.RequestException as e:
            raise BackendUnavailableError(
                f"Cannot reach Ollama at {self.base_url}: {e}"
            ) from e

        if not response.ok:
            raise BackendUnavailableError(
                f"Ollama error (model={self.model})",
                status_code=response.status_code,
                body=response.text or "",
            )

        try:
            data = response.json()
        except ValueError:
            return ""
        message = data.get("message") if isinstance(data, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        return content if isinstance(content, str) else ""


class OpenAIBackend:
    """Cloud backend using the OpenAI chat completions API."""

    name = "openai"

    def __init__(self, model: str, api_key: str):
        if not api_key:
            raise ConfigurationError("Missing OPENAI_API_KEY on the server.")

        from openai import OpenAI

        self.model = model
        self._client = OpenAI(api_key=api_key)

    def complete(
        self,
        prompt: str,
        *,
        temperature: float = DEFAULT_TEMPERATURE,
        json_mode: bool = False,
    ) -> str:
        """Run one chat completion and return ``choices[0].message.content``."""
        import openai

        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = self._client.chat.completions.create(**kwargs)
        except openai.APIStatusError as e:
            raise BackendUnavailableError(
                f"OpenAI error (model={self.model})",
                status_code=e.status_code,
                body=e.response.text if e.response is not None else "",
            ) from e
        except openai.OpenAIError as e:
            raise BackendUnavailableError(f"OpenAI request failed: {e}") from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


def create_backend(settings: Optional[Settings] = None) -> ChatBackend:
    """Build the backend *settings* selects.

    Raises:
        ConfigurationError: If the cloud backend is selected without a key
    """
    settings = settings or Settings.load()
    if settings.use_ollama:
        return OllamaBackend(settings.ollama_base_url, settings.ollama_model)
    if not settings.openai_api_key:
        raise ConfigurationError("Missing OPENAI_API_KEY on the server.")
    return OpenAIBackend(settings.openai_model, settings.openai_api_key)


async def check_backend(base_url: str) -> dict[str, Any]:
    """Probe an Ollama server's ``/api/tags``.

    Returns:
        Dict with keys: ok (bool), models (int), message (str).
    """
    url = f"{base_url.rstrip('/')}/api/tags"
    try:
        async with httpx.AsyncClient(timeout=HEALTH_TIMEOUT) as client:
            response = await client.get(url)
            if response.status_code != 200:
                return {"ok": False, "models": 0, "message": f"Ollama returned {response.status_code}"}
            data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.info("Backend probe of %s failed: %s", url, e)
        return {"ok": False, "models": 0, "message": "Not reachable"}

    models = data.get("models") if isinstance(data, dict) else None
    count = len(models) if isinstance(models, list) else 0
    return {
        "ok": True,
        "models": count,
        "message": f"{count} model(s)" if count else "No models",
    }
