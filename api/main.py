"""
ClaimFlow Agents: FastAPI application.

Startup sequence:
  1. Load settings (.env / environment); fail if OPENAI_API_KEY is absent
  2. Build the LLM client once and keep it on app.state
  3. Include API routers and the single-page UI
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from api.routes import workflow as workflow_router
from config.settings import Settings, langsmith_enabled
from llm.client import LLMClient

logger = logging.getLogger(__name__)
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

_INDEX_HTML = Path(__file__).resolve().parent / "static" / "index.html"

# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

app = FastAPI(
    title="ClaimFlow Agents",
    description="Five-step LLM claim workflow: parse, verify, code, draft, review.",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event() -> None:
    logger.info("ClaimFlow startup: loading settings …")
    settings = Settings.from_env()
    logging.getLogger().setLevel(settings.log_level)

    app.state.settings = settings
    app.state.llm_client = LLMClient.from_settings(settings)

    logger.info("ClaimFlow startup: ready (model=%s).", settings.openai_model)


# ---------------------------------------------------------------------------
# Health + UI
# ---------------------------------------------------------------------------


@app.get("/health", tags=["meta"])
def health() -> dict:
    """
    Liveness check. Reports the configured LLM model and LangSmith status.
    No LLM calls are made here.
    """
    settings = getattr(app.state, "settings", None)
    return {
        "status": "ok",
        "llm_model": settings.openai_model if settings else os.getenv("OPENAI_MODEL", "gpt-4o"),
        "langsmith_enabled": langsmith_enabled(),
    }


@app.get("/", include_in_schema=False)
def index() -> FileResponse:
    return FileResponse(_INDEX_HTML, media_type="text/html")


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(workflow_router.router)
