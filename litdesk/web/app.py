"""FastAPI app for Literature Desk (server mode)."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from litdesk import __version__
from litdesk.config import Settings
from litdesk.logging_config import configure_logging
from litdesk.web.routers import actions, common, papers
from litdesk.web.state import init_state, state

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the app; services are initialised on startup."""
    settings = settings or Settings.load()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize services on startup; stop background scans on shutdown."""
        configure_logging(settings.log_level)
        init_state(settings)
        yield
        if state.keyword_worker is not None:
            state.keyword_worker.stop()

    app = FastAPI(title="Literature Desk", version=__version__, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(common.router)
    app.include_router(papers.router)
    app.include_router(actions.router)
    return app
