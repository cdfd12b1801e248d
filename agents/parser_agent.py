"""
Parser Agent: LangGraph node.
Turns the request payload into a ClaimInput.

  - JSON path: a payload that already validates as ClaimInput is used directly
  - text path: anything else is sent to the LLM for field extraction
Both paths normalize the date of birth toward YYYY-MM-DD.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from langsmith import traceable
from pydantic import ValidationError

from agents.audit import log_entry
from llm.client import CompletionClient
from orchestrator.state import ClaimState
from schemas.claims import AgentLog, ClaimInput
from schemas.errors import ClaimValidationError

logger = logging.getLogger(__name__)

AGENT_NAME = "ParserAgent"

_ISO_DATE_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})", re.ASCII)
_MDY_DATE_RE = re.compile(r"(\d{1,2})[/\-](\d{1,2})[/\-](\d{2,4})", re.ASCII)


def normalize_dob(dob: str) -> str:
    """
    Coerce a date of birth to YYYY-MM-DD where the format is recognised.

    M/D/Y and M-D-Y are rewritten; a two-digit year is read as 19xx (naive).
    Unrecognised formats are returned unchanged.
    """
    if _ISO_DATE_RE.fullmatch(dob):
        return dob
    mdy = _MDY_DATE_RE.fullmatch(dob)
    if mdy:
        month, day, year = mdy.groups()
        if len(year) == 2:
            year = "19" + year
        return f"{year.zfill(4)}-{month.zfill(2)}-{day.zfill(2)}"
    return dob


# ---------------------------------------------------------------------------
# Text extraction (LLM)
# ---------------------------------------------------------------------------

EXTRACTION_PROMPT_TEMPLATE = """\
You are a strict JSON parser for healthcare claim snippets.
Extract fields: patientName, dob, insuranceId (nullable), procedure, cptCode (nullable).
Return ONLY JSON.

Snippet:
{snippet}"""


def _snippet(raw_input: Any) -> str:
    if isinstance(raw_input, str):
        return raw_input
    return json.dumps(raw_input, indent=2, default=str)


def _try_structured(raw_input: Any) -> ClaimInput | None:
    if not isinstance(raw_input, dict):
        return None
    try:
        return ClaimInput.model_validate(raw_input)
    except ValidationError:
        return None


@traceable(name="parser_agent")
async def parse_claim(raw_input: Any, llm: CompletionClient, logs: list[AgentLog]) -> ClaimInput:
    """Return a normalized ClaimInput; raise ClaimValidationError if fields are missing."""
    structured = _try_structured(raw_input)
    if structured is not None:
        claim = structured.model_copy(update={"dob": normalize_dob(structured.dob)})
        logs.append(log_entry(AGENT_NAME, "parse-json", "Parsed JSON claim.", claim))
        logger.info("parser_agent: structured claim accepted")
        return claim

    prompt = EXTRACTION_PROMPT_TEMPLATE.format(snippet=_snippet(raw_input)).strip()
    extracted = await llm.complete(prompt)
    if isinstance(extracted.get("dob"), str):
        extracted = {**extracted, "dob": normalize_dob(extracted["dob"])}

    try:
        claim = ClaimInput.model_validate(extracted)
    except ValidationError as e:
        raise ClaimValidationError(f"Could not extract a complete claim: {e}") from e

    logs.append(log_entry(AGENT_NAME, "parse-text", "Parsed text claim.", claim))
    logger.info("parser_agent: claim extracted from free text")
    return claim


# ---------------------------------------------------------------------------
# LangGraph node
# ---------------------------------------------------------------------------


async def parser_agent(state: ClaimState, llm: CompletionClient) -> ClaimState:
    """
    LangGraph node: payload → ClaimInput.

    Reads:  state['raw_input']
    Writes: state['parsed'], one entry appended to state['logs']
    """
    logs: list[AgentLog] = []
    parsed = await parse_claim(state.get("raw_input"), llm, logs)
    return {"parsed": parsed, "logs": logs}
