"""Common routes: health, backend probe, LLM backend settings."""

from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from litdesk import __version__
from litdesk.config import LLM_CONFIG_NAME, save_llm_config
from litdesk.services.llm_service import check_backend
from litdesk.web.state import state

router = APIRouter(prefix="/api", tags=["common"])


@router.get("/health")
async def health():
    """Liveness check with the paper count."""
    return JSONResponse({
        "ok": True,
        "version": __version__,
        "papers": state.repo.count(),
    })


@router.get("/backend/status")
async def backend_status():
    """Probe the self-hosted backend (model count or 'Not reachable')."""
    result = await check_backend(state.settings.ollama_base_url)
    result["backend"] = state.settings.backend_name
    result["model"] = state.settings.active_model
    return JSONResponse(result)


# ============================================================================
# LLM backend settings  (/api/settings/llm)
# ============================================================================


class LLMSettingsPayload(BaseModel):
    """Request body for changing backend selection and models."""
    backend: Optional[str] = None
    ollama_base_url: Optional[str] = None
    ollama_model: Optional[str] = None
    openai_model: Optional[str] = None
    openai_api_key: Optional[str] = None


def _settings_view() -> dict:
    s = state.settings
    return {
        "backend": s.backend_name,
        "ollama_base_url": s.ollama_base_url,
        "ollama_model": s.ollama_model,
        "openai_model": s.openai_model,
        "has_openai_key": bool(s.openai_api_key),
    }


@router.get("/settings/llm")
async def get_llm_settings():
    """Current backend selection (the API key itself is never returned)."""
    return JSONResponse(_settings_view())


@router.put("/settings/llm")
async def update_llm_settings(body: LLMSettingsPayload):
    """Update backend settings and persist them to ``llm.yaml``."""
    s = state.settings
    changes = body.model_dump(exclude_unset=True)
    backend = changes.pop("backend", None)
    if backend is not None and backend not in ("ollama", "openai"):
        return JSONResponse({"error": "backend must be 'ollama' or 'openai'"}, status_code=400)
    if backend == "openai" and not (changes.get("openai_api_key") or s.openai_api_key):
        return JSONResponse({"error": "Missing OPENAI_API_KEY on the server."}, status_code=400)

    s.update(**{k: v for k, v in changes.items() if v is not None})
    if backend is not None:
        s.use_ollama = backend == "ollama"

    save_llm_config(s.metadata_dir / LLM_CONFIG_NAME, s)
    return JSONResponse(_settings_view())
