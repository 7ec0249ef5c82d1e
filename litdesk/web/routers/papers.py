"""Paper endpoints: list, detail, manual entry, edit, bulk delete, timeline."""

from typing import Any, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from litdesk.database.repository import clean_ids
from litdesk.errors import NotFoundError, ValidationError
from litdesk.services.note_service import NoteService
from litdesk.services.timeline_service import build_timeline
from litdesk.utils.text import coerce_citation_count
from litdesk.web.state import start_keywords_bg, state

router = APIRouter(prefix="/api", tags=["papers"])


# ============================================================================
# Request bodies
# ============================================================================


class ManualPaperPayload(BaseModel):
    """Request body for adding a paper by hand."""
    author: str = ""
    title: str = ""
    url: str = ""
    published_date: str = ""
    citation_count: Optional[Any] = None
    note: str = ""


class PaperUpdatePayload(BaseModel):
    """Partial update from the detail view; omitted fields are untouched."""
    author: Optional[str] = None
    title: Optional[str] = None
    url: Optional[str] = None
    published_date: Optional[str] = None
    citation_count: Optional[Any] = None
    note: Optional[str] = None
    keywords: Optional[list[str]] = None


# ============================================================================
# Read
# ============================================================================


@router.get("/papers")
async def list_papers():
    """All papers, newest first, without the note text."""
    papers = state.repo.list_summaries()
    start_keywords_bg()
    return JSONResponse(papers)


@router.get("/papers/{paper_id}")
async def get_paper(paper_id: int):
    """Full record including the note."""
    try:
        paper = state.repo.get(paper_id)
    except NotFoundError:
        return JSONResponse({"error": "Not found"}, status_code=404)
    return JSONResponse(paper.to_dict())


@router.get("/timeline")
async def timeline():
    """Papers ordered by year with short highlights."""
    entries = build_timeline(state.repo.list_papers())
    return JSONResponse([e.to_dict() for e in entries])


# ============================================================================
# Write
# ============================================================================


@router.post("/papers")
async def create_paper(body: ManualPaperPayload):
    """Add a paper from manually entered fields (no model call)."""
    try:
        paper = NoteService(state.repo).add_manual(body.model_dump())
    except ValidationError as e:
        return JSONResponse({"error": e.message}, status_code=400)
    start_keywords_bg()
    return JSONResponse(paper.to_dict(), status_code=201)


@router.patch("/papers/{paper_id}")
async def update_paper(paper_id: int, body: PaperUpdatePayload):
    """Save edits from the detail view."""
    fields = body.model_dump(exclude_unset=True)
    for key in ("author", "title", "url", "published_date", "note"):
        if key in fields:
            fields[key] = (fields[key] or "").strip()
    if "citation_count" in fields:
        raw = fields["citation_count"]
        fields["citation_count"] = coerce_citation_count(raw)
        if fields["citation_count"] is None and raw not in (None, ""):
            return JSONResponse({"error": "citation_count must be a number"}, status_code=400)

    try:
        paper = state.repo.update(paper_id, fields)
    except NotFoundError:
        return JSONResponse({"error": "Not found"}, status_code=404)
    return JSONResponse(paper.to_dict())


@router.delete("/papers")
async def delete_papers(request: Request):
    """Delete the papers whose ids are listed in ``{"ids": [...]}``."""
    try:
        data = await request.json()
    except ValueError:
        data = {}
    raw_ids = data.get("ids") if isinstance(data, dict) else None
    ids = clean_ids(raw_ids) if isinstance(raw_ids, list) else []
    if not ids:
        return JSONResponse({"error": "ids is required."}, status_code=400)

    deleted = state.repo.delete(ids)
    return JSONResponse({"deleted": deleted})
