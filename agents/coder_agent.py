"""
Coder Agent: LangGraph node.
Validates or suggests a CPT code for the claim's procedure.

Stage 1: Lookup  (deterministic, no API call)
  - a small reference table maps CPT codes to procedure-name substrings
  - a supplied code is kept when its substrings match the procedure text
  - otherwise the first table entry (declaration order) that matches wins

Stage 2: Justification  (optional LLM enrichment, one sentence)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from langsmith import traceable

from agents.audit import log_entry
from llm.client import CompletionClient, enrich
from orchestrator.state import ClaimState
from schemas.claims import AgentLog, ClaimInput, CoderResult

logger = logging.getLogger(__name__)

AGENT_NAME = "CoderAgent"
FALLBACK_JUSTIFICATION = "Heuristic CPT validation completed."


@dataclass(frozen=True)
class CptReference:
    code: str
    label: str
    procedures: tuple[str, ...]  # lowercase substrings of the procedure text

    def matches(self, procedure: str) -> bool:
        return any(p in procedure for p in self.procedures)


# Scan order is the declaration order of this tuple.
CPT_REFERENCE: tuple[CptReference, ...] = (
    CptReference("73721", "MRI Lower Extremity w/o contrast", ("mri knee", "knee mri")),
    CptReference("70551", "MRI Brain w/o contrast", ("mri brain", "brain mri")),
    CptReference("72148", "MRI Lumbar Spine w/o contrast", ("mri spine", "lumbar mri")),
)

_CPT_BY_CODE: dict[str, CptReference] = {ref.code: ref for ref in CPT_REFERENCE}


# ---------------------------------------------------------------------------
# Stage 1: Lookup
# ---------------------------------------------------------------------------


def lookup_cpt(procedure: str, cpt_code: Optional[str]) -> tuple[Optional[str], bool]:
    """Return (suggested_code, valid) for the procedure text and supplied code."""
    proc = procedure.lower().strip()

    ref = _CPT_BY_CODE.get(cpt_code) if cpt_code else None
    if ref is not None and ref.matches(proc):
        return cpt_code, True

    for candidate in CPT_REFERENCE:
        if candidate.matches(proc):
            return candidate.code, False
    return None, False


# ---------------------------------------------------------------------------
# Stage 2: Justification (optional)
# ---------------------------------------------------------------------------

JUSTIFICATION_PROMPT_TEMPLATE = """\
Provide a one-sentence justification for CPT selection for the procedure "{procedure}".
If CPT "{code}" is appropriate, confirm. No PHI.
Return JSON: {{"justification": string}}"""


async def justify(claim: ClaimInput, suggested: Optional[str], llm: CompletionClient) -> str:
    prompt = JUSTIFICATION_PROMPT_TEMPLATE.format(
        procedure=claim.procedure,
        code=suggested or claim.cpt_code or "",
    )
    enrichment = await enrich(llm, prompt, "coder")
    if enrichment.degraded:
        return FALLBACK_JUSTIFICATION
    justification = enrichment.text("justification")
    return FALLBACK_JUSTIFICATION if justification is None else justification


# ---------------------------------------------------------------------------
# Step
# ---------------------------------------------------------------------------


@traceable(name="coder_agent")
async def code_claim(claim: ClaimInput, llm: CompletionClient, logs: list[AgentLog]) -> CoderResult:
    suggested, valid = lookup_cpt(claim.procedure, claim.cpt_code)
    justification = await justify(claim, suggested, llm)

    logger.info("coder_agent: suggested=%s valid=%s", suggested, valid)
    logs.append(
        log_entry(
            AGENT_NAME,
            "code-validate",
            "Validated/suggested CPT code.",
            {"suggested": suggested, "valid": valid},
        )
    )
    return CoderResult(suggested_cpt=suggested, justification=justification, valid=valid)


async def coder_agent(state: ClaimState, llm: CompletionClient) -> ClaimState:
    """
    LangGraph node: CPT lookup + optional justification.

    Reads:  state['parsed']
    Writes: state['coder'], one entry appended to state['logs']
    """
    logs: list[AgentLog] = []
    coder = await code_claim(state["parsed"], llm, logs)
    return {"coder": coder, "logs": logs}
