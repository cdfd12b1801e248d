"""
Workflow API routes.
POST /api/run      run the five-step claim workflow on a JSON claim or free text
GET  /api/samples  demo claims for the UI
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from data.sample_claims import SAMPLE_CLAIMS
from llm.client import CompletionClient
from orchestrator.workflow import run_workflow
from schemas.claims import WorkflowResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["workflow"])


def get_llm_client(request: Request) -> CompletionClient:
    """FastAPI dependency: the LLM client built once at startup."""
    return request.app.state.llm_client


def _extract_input(body: Any) -> Any:
    """Use body['input'] when present, otherwise the whole body."""
    if isinstance(body, dict) and body.get("input") is not None:
        return body["input"]
    return body


@router.post("/run", response_model=WorkflowResponse)
async def run(request: Request, llm: CompletionClient = Depends(get_llm_client)):
    """
    Run parse → verify → code → draft → review on the submitted claim.
    Any failure along the way is reported as 400 {"error": message}.
    """
    try:
        body = await request.json()
        result = await run_workflow(_extract_input(body), llm)
        validated = WorkflowResponse.model_validate(result)
    except Exception as e:
        logger.exception("Workflow run failed: %s", e)
        return JSONResponse(status_code=400, content={"error": str(e) or type(e).__name__})

    return JSONResponse(status_code=200, content=validated.model_dump(mode="json", by_alias=True))


@router.get("/samples")
def samples() -> list[dict[str, Any]]:
    return copy.deepcopy(list(SAMPLE_CLAIMS))
