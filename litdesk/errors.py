"""Error types shared by the store, the LLM services and the HTTP layer.

Every error carries a short, user-facing ``message``; details useful for
debugging (HTTP status, response body) travel as attributes and go to the
log, not to the user.
"""

from typing import Optional


class LitDeskError(Exception):
    """Base class for all application errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LitDeskError):
    """A required input was empty or malformed."""


class NotFoundError(LitDeskError):
    """No paper exists with the requested id."""

    def __init__(self, paper_id: int):
        super().__init__(f"Paper {paper_id} not found")
        self.paper_id = paper_id


class ConfigurationError(LitDeskError):
    """The selected backend is missing a required setting (e.g. API key)."""


class BackendUnavailableError(LitDeskError):
    """The LLM backend could not be reached or answered with a non-2xx."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: str = "",
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        detail = f": {self.body[:200]}" if self.body else ""
        return f"{self.message} (HTTP {self.status_code}){detail}"


class ExtractionError(BackendUnavailableError):
    """Metadata or keyword extraction failed at the backend."""


class QueryError(LitDeskError):
    """A literature question could not be answered.

    ``cause`` is the backend error when the model call failed, or None
    when the question itself was rejected.
    """

    def __init__(self, message: str, cause: Optional[BackendUnavailableError] = None):
        super().__init__(message)
        self.cause = cause


class DecodeError(LitDeskError):
    """Model output was not JSON. Always recovered locally, never surfaced."""
