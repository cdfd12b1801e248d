"""
Workflow runner: executes the five-step graph, derives the timing/KPI
figures and asks the LLM for a plain-language recap.

The returned dict has the WorkflowResponse shape; the API layer validates it.
"""

from __future__ import annotations

import json
import logging
import math
import time
from typing import Any

from langsmith import traceable

from llm.client import CompletionClient, enrich
from orchestrator.graph import graph, run_config
from schemas.claims import (
    ClaimInput,
    ReviewerResult,
    SubmissionDraft,
    VerificationIssue,
    WorkflowMetrics,
)

logger = logging.getLogger(__name__)

# Toy manual-process estimate: 12 minutes for a batch of 10 claims.
BASELINE_SECONDS = 12 * 60 // 10
CLEAN_CLAIM_RATE_READY = 98
CLEAN_CLAIM_RATE_BLOCKED = 82
MAX_RECAP_ISSUES = 5


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


def compute_metrics(elapsed_seconds: float, submission: SubmissionDraft) -> WorkflowMetrics:
    automated = max(1, math.floor(elapsed_seconds))
    time_saved = math.floor((1 - automated / BASELINE_SECONDS) * 100 + 0.5)
    clean_rate = CLEAN_CLAIM_RATE_READY if submission.status == "READY" else CLEAN_CLAIM_RATE_BLOCKED
    return WorkflowMetrics(
        baseline_seconds=BASELINE_SECONDS,
        automated_seconds=automated,
        time_saved_percent=time_saved,
        clean_claim_rate=clean_rate,
    )


# ---------------------------------------------------------------------------
# Recap
# ---------------------------------------------------------------------------

RECAP_PROMPT_TEMPLATE = """\
Return ONLY JSON: {{ "text": string }}.
Write a concise, non-technical recap (5-7 short lines, emojis ok) of what the AI assistant did:
Reader → Checker → Coder → Submitter → Reviewer.
Use the outcomes below, be to-the-point, avoid jargon, under 120 words.

Outcomes:
{outcomes_json}"""


def recap_snapshot(
    parsed: ClaimInput,
    issues: list[VerificationIssue],
    suggested_cpt: str | None,
    submission: SubmissionDraft,
    reviewer: ReviewerResult,
    metrics: WorkflowMetrics,
) -> dict[str, Any]:
    """Non-sensitive outcome summary: field presence instead of raw PHI values."""
    return {
        "patientName": "Present" if parsed.patient_name else "Missing",
        "dob": "Present" if parsed.dob else "Missing",
        "insuranceId": "Present" if submission.insurance_id else "Missing",
        "procedure": parsed.procedure or "Missing",
        "cpt": suggested_cpt or submission.cpt_code or None,
        "issues": [f"{i.severity}:{i.message}" for i in issues][:MAX_RECAP_ISSUES],
        "status": submission.status,
        "denialRisk": reviewer.denial_risk,
        "timeSavedPercent": metrics.time_saved_percent,
        "cleanClaimRate": metrics.clean_claim_rate,
    }


def fallback_recap(snapshot: dict[str, Any]) -> str:
    return "\n".join(
        [
            "🧾 Read the claim and pulled out key fields.",
            "✅ Checked for missing/incorrect details.",
            f"💬 Matched the procedure to a billing code (CPT: {snapshot['cpt'] or 'n/a'}).",
            f"📤 Prepared a submission draft, status: {snapshot['status']}.",
            f"🔍 Denial risk: {snapshot['denialRisk']}.",
            f"⚡ Estimated time saved: {snapshot['timeSavedPercent']}% · "
            f"Clean-claim rate: {snapshot['cleanClaimRate']}%.",
        ]
    )


async def explain(snapshot: dict[str, Any], llm: CompletionClient) -> str:
    prompt = RECAP_PROMPT_TEMPLATE.format(outcomes_json=json.dumps(snapshot, ensure_ascii=False))
    enrichment = await enrich(llm, prompt, "recap")
    if enrichment.degraded:
        return fallback_recap(snapshot)

    text = enrichment.text("text")
    if text is None:
        return fallback_recap(snapshot)
    return text.strip()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


@traceable(name="claim_workflow")
async def run_workflow(raw_input: Any, llm: CompletionClient) -> dict[str, Any]:
    """
    Run parse → verify → code → draft → review, then metrics and recap.

    Parser, submission self-validation and non-LLM failures propagate; the
    optional LLM calls degrade to fixed fallbacks.
    """
    started = time.perf_counter()
    state = await graph.ainvoke({"raw_input": raw_input, "logs": []}, config=run_config(llm))
    elapsed = time.perf_counter() - started

    parsed: ClaimInput = state["parsed"]
    verified = state["verified"]
    coder = state["coder"]
    submission: SubmissionDraft = state["submission"]
    reviewer: ReviewerResult = state["reviewer"]

    metrics = compute_metrics(elapsed, submission)
    snapshot = recap_snapshot(parsed, verified.issues, coder.suggested_cpt, submission, reviewer, metrics)
    explanation = await explain(snapshot, llm)

    logger.info(
        "workflow complete: status=%s risk=%s automated=%ss",
        submission.status,
        reviewer.denial_risk,
        metrics.automated_seconds,
    )

    return {
        "parsed": parsed.model_dump(),
        "verified": verified.model_dump(),
        "coder": coder.model_dump(),
        "submission": submission.model_dump(),
        "reviewer": reviewer.model_dump(),
        "metrics": metrics.model_dump(),
        "logs": [entry.model_dump() for entry in state["logs"]],
        "explanation": explanation,
    }
