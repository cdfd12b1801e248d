"""Claim state for the claim workflow LangGraph pipeline."""

import operator
from typing import Annotated, Any, TypedDict

from schemas.claims import (
    AgentLog,
    ClaimInput,
    CoderResult,
    ReviewerResult,
    SubmissionDraft,
    VerificationResult,
)


class ClaimState(TypedDict, total=False):
    """State passed between agents in the claim workflow graph."""

    raw_input: Any  # request payload: ClaimInput-shaped object or free text

    # parser_agent output
    parsed: ClaimInput

    # verifier_agent output
    verified: VerificationResult

    # coder_agent output
    coder: CoderResult

    # submission_agent output
    submission: SubmissionDraft

    # reviewer_agent output
    reviewer: ReviewerResult

    # audit trail: each node returns one entry, appended in step order
    logs: Annotated[list[AgentLog], operator.add]

