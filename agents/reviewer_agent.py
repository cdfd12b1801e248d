"""
Reviewer Agent: LangGraph node.
Classifies denial risk from the submission draft and asks the LLM for a
short rationale.
"""

from __future__ import annotations

import json
import logging

from langsmith import traceable

from agents.audit import log_entry
from llm.client import CompletionClient, enrich
from orchestrator.state import ClaimState
from schemas.claims import AgentLog, DenialRisk, ReviewerResult, SubmissionDraft

logger = logging.getLogger(__name__)

AGENT_NAME = "ReviewerAgent"
FALLBACK_RATIONALE = "Automated review completed."

RATIONALE_PROMPT_TEMPLATE = """\
Given this submission draft, estimate denial risk and explain briefly (max 2 sentences). No PHI.
{submission_json}
Return JSON: {{"rationale": string}}"""


def assess_denial_risk(submission: SubmissionDraft) -> DenialRisk:
    if submission.status == "BLOCKED":
        return "high"
    if not submission.insurance_id or not submission.cpt_code:
        return "medium"
    return "low"


@traceable(name="reviewer_agent")
async def review_submission(
    submission: SubmissionDraft, llm: CompletionClient, logs: list[AgentLog]
) -> ReviewerResult:
    risk = assess_denial_risk(submission)

    submission_json = json.dumps(submission.model_dump(mode="json", by_alias=True))
    enrichment = await enrich(llm, RATIONALE_PROMPT_TEMPLATE.format(submission_json=submission_json), "reviewer")
    # degraded or non-string both yield None; an empty string is kept as-is
    rationale = enrichment.text("rationale")
    if rationale is None:
        rationale = FALLBACK_RATIONALE

    logger.info("reviewer_agent: denial risk=%s", risk)
    logs.append(
        log_entry(AGENT_NAME, "review", "Assessed denial risk.", {"risk": risk, "rationale": rationale})
    )
    return ReviewerResult(denial_risk=risk, rationale=rationale)


async def reviewer_agent(state: ClaimState, llm: CompletionClient) -> ClaimState:
    """
    LangGraph node: denial-risk heuristic + optional rationale.

    Reads:  state['submission']
    Writes: state['reviewer'], one entry appended to state['logs']
    """
    logs: list[AgentLog] = []
    reviewer = await review_submission(state["submission"], llm, logs)
    return {"reviewer": reviewer, "logs": logs}
