"""
Submission Agent: LangGraph node.
Assembles the submission draft from the claim, the verifier issues and the
coder suggestion. No LLM calls are made here.
"""

from __future__ import annotations

import logging
from typing import Optional

from langsmith import traceable
from pydantic import ValidationError

from agents.audit import log_entry
from orchestrator.state import ClaimState
from schemas.claims import AgentLog, ClaimInput, SubmissionDraft, VerificationIssue
from schemas.errors import ClaimValidationError

logger = logging.getLogger(__name__)

AGENT_NAME = "SubmissionAgent"


def render_notes(issues: list[VerificationIssue]) -> list[str]:
    return [f"{i.severity.upper()}: {i.message}" for i in issues]


@traceable(name="submission_agent")
def draft_submission(
    claim: ClaimInput,
    issues: list[VerificationIssue],
    suggested_cpt: Optional[str],
    logs: list[AgentLog],
) -> SubmissionDraft:
    """
    BLOCKED iff any issue has severity 'error'; the suggested code wins over
    the claim's own code. The draft is re-validated before it is returned.
    """
    blocked = any(i.severity == "error" for i in issues)
    draft = {
        "patient": claim.patient_name,
        "dob": claim.dob,
        "insurance_id": claim.insurance_id,
        "procedure": claim.procedure,
        "cpt_code": suggested_cpt if suggested_cpt is not None else claim.cpt_code,
        "status": "BLOCKED" if blocked else "READY",
        "notes": render_notes(issues),
    }
    try:
        validated = SubmissionDraft.model_validate(draft)
    except ValidationError as e:
        raise ClaimValidationError(f"Submission draft failed validation: {e}") from e

    logger.info("submission_agent: status=%s cpt=%s", validated.status, validated.cpt_code)
    logs.append(log_entry(AGENT_NAME, "draft", "Prepared submission draft.", validated))
    return validated


async def submission_agent(state: ClaimState) -> ClaimState:
    """
    LangGraph node: build and self-validate the submission draft.

    Reads:  state['parsed'], state['verified'], state['coder']
    Writes: state['submission'], one entry appended to state['logs']
    """
    logs: list[AgentLog] = []
    submission = draft_submission(
        state["parsed"],
        state["verified"].issues,
        state["coder"].suggested_cpt,
        logs,
    )
    return {"submission": submission, "logs": logs}
