"""
Pydantic contracts for the claim workflow.

Python code uses snake_case attributes; JSON on the wire is camelCase
(patientName, insuranceId, suggestedCpt, ...) via the alias generator.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

Severity = Literal["info", "warn", "error"]
SubmissionStatus = Literal["READY", "BLOCKED"]
DenialRisk = Literal["low", "medium", "high"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Step contracts
# ---------------------------------------------------------------------------


class ClaimInput(_CamelModel):
    patient_name: str
    dob: str  # YYYY-MM-DD preferred; other formats pass through
    insurance_id: Optional[str] = None
    procedure: str
    cpt_code: Optional[str] = None


class VerificationIssue(_CamelModel):
    field: str
    message: str
    severity: Severity


class VerificationResult(_CamelModel):
    issues: list[VerificationIssue]
    normalized: ClaimInput


class CoderResult(_CamelModel):
    suggested_cpt: Optional[str]
    justification: str
    valid: bool


class SubmissionDraft(_CamelModel):
    patient: str
    dob: str
    insurance_id: Optional[str]
    procedure: str
    cpt_code: Optional[str]
    status: SubmissionStatus
    notes: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _status_matches_notes(self) -> "SubmissionDraft":
        """BLOCKED iff at least one note was rendered from an error issue."""
        has_error = any(note.startswith("ERROR:") for note in self.notes)
        if has_error != (self.status == "BLOCKED"):
            raise ValueError(
                f"status {self.status} is inconsistent with notes "
                f"({'has' if has_error else 'no'} ERROR entries)"
            )
        return self


class ReviewerResult(_CamelModel):
    denial_risk: DenialRisk
    rationale: str


class WorkflowMetrics(_CamelModel):
    baseline_seconds: int
    automated_seconds: int
    time_saved_percent: int
    clean_claim_rate: int  # simulated KPI, not measured


class AgentLog(_CamelModel):
    agent: str
    step: str
    detail: str
    data: Optional[Any] = None
    ts: int  # epoch milliseconds


# ---------------------------------------------------------------------------
# Aggregate response
# ---------------------------------------------------------------------------


class WorkflowResponse(_CamelModel):
    parsed: ClaimInput
    verified: VerificationResult
    coder: CoderResult
    submission: SubmissionDraft
    reviewer: ReviewerResult
    metrics: WorkflowMetrics
    logs: list[AgentLog]
    explanation: str
