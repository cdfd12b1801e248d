"""
Verifier Agent: LangGraph node.
Two levels run in sequence; all issues collected in insertion order.

Level 1: Rule-based field checks   (deterministic, no API call)
Level 2: LLM consistency notes     (optional enrichment, at most 3 info issues)
"""

from __future__ import annotations

import json
import logging

from langsmith import traceable

from agents.audit import log_entry
from llm.client import CompletionClient, enrich
from orchestrator.state import ClaimState
from schemas.claims import AgentLog, ClaimInput, Severity, VerificationIssue, VerificationResult

logger = logging.getLogger(__name__)

AGENT_NAME = "VerifierAgent"
MAX_CONSISTENCY_NOTES = 3


def _issue(field: str, message: str, severity: Severity) -> VerificationIssue:
    return VerificationIssue(field=field, message=message, severity=severity)


# ---------------------------------------------------------------------------
# Level 1: Rule-based validation (deterministic, no API call)
# ---------------------------------------------------------------------------


def check_required_fields(claim: ClaimInput) -> list[VerificationIssue]:
    """Flag missing claim fields. Each rule yields at most one issue."""
    issues: list[VerificationIssue] = []

    if not claim.insurance_id or not claim.insurance_id.strip():
        issues.append(_issue("insuranceId", "Missing insurance ID.", "error"))
    if not claim.dob:
        issues.append(_issue("dob", "DOB missing or invalid format.", "warn"))
    if not claim.patient_name:
        issues.append(_issue("patientName", "Patient name missing.", "error"))
    if not claim.procedure:
        issues.append(_issue("procedure", "Procedure missing.", "error"))

    return issues


# ---------------------------------------------------------------------------
# Level 2: LLM consistency notes (optional)
# ---------------------------------------------------------------------------

CONSISTENCY_PROMPT_TEMPLATE = """\
Check the following claim for obvious consistency issues in 3 bullets max (no PHI storage).
Claim JSON:
{claim_json}
Return JSON: {{ "notes": string[] }} only."""


async def consistency_notes(claim: ClaimInput, llm: CompletionClient) -> list[VerificationIssue]:
    claim_json = json.dumps(claim.model_dump(mode="json", by_alias=True))
    enrichment = await enrich(llm, CONSISTENCY_PROMPT_TEMPLATE.format(claim_json=claim_json), "verifier")

    if enrichment.degraded:
        notes: list[str] = []
    else:
        notes = enrichment.strings("notes", MAX_CONSISTENCY_NOTES) or []

    return [_issue("general", note, "info") for note in notes]


# ---------------------------------------------------------------------------
# Step
# ---------------------------------------------------------------------------


@traceable(name="verifier_agent")
async def verify_claim(claim: ClaimInput, llm: CompletionClient, logs: list[AgentLog]) -> VerificationResult:
    issues = check_required_fields(claim)
    issues.extend(await consistency_notes(claim, llm))

    logger.info(
        "verifier_agent: %d issue(s), %d error(s)",
        len(issues),
        sum(1 for i in issues if i.severity == "error"),
    )
    logs.append(
        log_entry(AGENT_NAME, "validate", "Validated fields & consistency.", {"issues": issues})
    )
    return VerificationResult(issues=issues, normalized=claim)


async def verifier_agent(state: ClaimState, llm: CompletionClient) -> ClaimState:
    """
    LangGraph node: rule checks + optional LLM notes.

    Reads:  state['parsed']
    Writes: state['verified'], one entry appended to state['logs']
    """
    logs: list[AgentLog] = []
    verified = await verify_claim(state["parsed"], llm, logs)
    return {"verified": verified, "logs": logs}
