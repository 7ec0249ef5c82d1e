"""Application state shared by the HTTP routers."""

import logging
from typing import Callable, Optional

from litdesk.config import Settings
from litdesk.database.repository import PaperRepository
from litdesk.services.extraction_service import KeywordExtractor, MetadataExtractor
from litdesk.services.keyword_service import KeywordWorker
from litdesk.services.llm_service import ChatBackend, create_backend
from litdesk.services.note_service import NoteService
from litdesk.services.query_service import QueryAnswerer

logger = logging.getLogger(__name__)


# ============================================================================
# Global State
# ============================================================================


class AppState:
    """Mutable singleton holding the runtime services."""

    settings: Settings
    repo: PaperRepository
    keyword_worker: Optional[KeywordWorker] = None
    # Swapped out in tests; defaults to building from settings on each call
    backend_factory: Optional[Callable[[], ChatBackend]] = None


state = AppState()


def init_state(settings: Settings) -> None:
    """(Re)build every service from *settings*."""
    state.settings = settings
    state.repo = PaperRepository(settings.db_path)
    state.backend_factory = None
    state.keyword_worker = KeywordWorker(
        state.repo,
        lambda: KeywordExtractor(get_backend()),
    )
    logger.info(
        "Store at %s, backend %s (%s)",
        settings.db_path,
        settings.backend_name,
        settings.active_model,
    )


# ============================================================================
# Service helpers
# ============================================================================


def get_backend() -> ChatBackend:
    """Backend for the current request (raises ConfigurationError)."""
    if state.backend_factory is not None:
        return state.backend_factory()
    return create_backend(state.settings)


def note_service() -> NoteService:
    return NoteService(state.repo, MetadataExtractor(get_backend()))


def query_answerer() -> QueryAnswerer:
    return QueryAnswerer(get_backend())


def start_keywords_bg() -> bool:
    """Kick off one keyword scan in the background if enabled."""
    worker = state.keyword_worker
    if worker is None or not state.settings.auto_keywords:
        return False
    return worker.trigger()
