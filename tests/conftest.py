"""
Shared pytest fixtures for litdesk tests.

Provides a stub chat backend so no test ever talks to a real model.
"""

from pathlib import Path
from typing import Optional, Union

import pytest

from litdesk.config import Settings
from litdesk.database.repository import PaperRepository
from litdesk.errors import BackendUnavailableError

ENV_VARS = (
    "PORT",
    "HOST",
    "SQLITE_PATH",
    "OLLAMA_BASE_URL",
    "OLLAMA_MODEL",
    "OPENAI_MODEL",
    "OPENAI_API_KEY",
    "USE_OLLAMA",
    "CORS_ORIGIN",
    "LITDESK_LOG_LEVEL",
    "LITDESK_AUTO_KEYWORDS",
)


class StubBackend:
    """Chat backend returning canned replies and recording prompts.

    Replies are consumed in order; the last one repeats.  An exception in
    the reply list is raised instead of returned.
    """

    name = "stub"
    model = "stub-model"

    def __init__(self, *replies: Union[str, Exception]):
        self.replies = list(replies) or ["{}"]
        self.prompts: list[str] = []
        self.json_modes: list[bool] = []

    def complete(self, prompt: str, *, temperature: float = 0.2, json_mode: bool = False) -> str:
        self.prompts.append(prompt)
        self.json_modes.append(json_mode)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


def backend_error(status: Optional[int] = 503, body: str = "model not loaded") -> BackendUnavailableError:
    return BackendUnavailableError("Ollama error (model=stub)", status_code=status, body=body)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every environment variable Settings reads."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.fixture
def settings(tmp_path: Path, clean_env):
    """Fresh Settings singleton rooted at a temp dir, auto keywords off."""
    Settings.reset()
    s = Settings.load(base_dir=tmp_path)
    s.update(auto_keywords=False)
    yield s
    Settings.reset()


@pytest.fixture
def repo(tmp_path: Path) -> PaperRepository:
    """Repository over an empty temp database."""
    return PaperRepository(tmp_path / "papers.db")


@pytest.fixture
def stub_backend() -> StubBackend:
    return StubBackend()
