"""Action routes: note submission, literature query, keyword trigger."""

import logging
from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from litdesk.errors import ConfigurationError, ExtractionError, QueryError
from litdesk.web.state import note_service, query_answerer, start_keywords_bg, state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["actions"])


class NotePayload(BaseModel):
    """Request body for submitting a raw note."""
    noteText: Any = None


class QueryPayload(BaseModel):
    """Request body for a literature question."""
    question: Any = None


# ============================================================================
# Notes
# ============================================================================


@router.post("/notes")
def create_note(body: NotePayload):
    """Extract metadata from a note and store the resulting paper."""
    note_text = body.noteText.strip() if isinstance(body.noteText, str) else ""
    if not note_text:
        return JSONResponse({"error": "noteText is required"}, status_code=400)

    try:
        paper = note_service().submit_note(note_text)
    except ConfigurationError as e:
        logger.error("Note rejected: %s", e.message)
        return JSONResponse({"error": e.message}, status_code=500)
    except ExtractionError as e:
        logger.error("Metadata extraction failed: status=%s", e.status_code)
        return JSONResponse({"error": "Failed to extract metadata."}, status_code=500)

    start_keywords_bg()
    return JSONResponse(paper.to_dict(), status_code=201)


# ============================================================================
# Query
# ============================================================================


@router.post("/query")
def query(body: QueryPayload):
    """Answer a question from the first notes in list order."""
    question = body.question if isinstance(body.question, str) else ""
    if not question.strip():
        return JSONResponse({"error": "Ask a question first."}, status_code=400)

    try:
        answer = query_answerer().answer(state.repo.list_papers(), question)
    except ConfigurationError as e:
        return JSONResponse({"error": e.message}, status_code=500)
    except QueryError as e:
        status = 502 if e.cause is not None else 400
        return JSONResponse({"error": e.message}, status_code=status)
    return JSONResponse({"answer": answer})


# ============================================================================
# Keywords
# ============================================================================


@router.post("/keywords/run")
async def run_keywords():
    """Start one background keyword scan (no-op if one is running)."""
    worker = state.keyword_worker
    started = worker.trigger() if worker is not None else False
    return JSONResponse({"started": started}, status_code=202)


@router.get("/keywords/status")
async def keywords_status():
    """Ids currently being processed."""
    worker = state.keyword_worker
    return JSONResponse({
        "in_flight": worker.in_flight if worker is not None else [],
        "running": worker.running if worker is not None else False,
    })
