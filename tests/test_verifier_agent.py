"""Test the verifier step rule checks and optional LLM notes."""

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from agents.verifier_agent import check_required_fields, verify_claim
from llm.client import LLMClient
from schemas.claims import ClaimInput
from schemas.errors import LLMNetworkError


def _claim(**overrides) -> ClaimInput:
    fields = {
        "patient_name": "Aaron Lee",
        "dob": "1979-11-02",
        "insurance_id": "ZX-991144",
        "procedure": "MRI Lumbar Spine",
        "cpt_code": "72148",
    }
    fields.update(overrides)
    return ClaimInput(**fields)


def test_complete_claim_has_no_rule_issues():
    assert check_required_fields(_claim()) == []


@pytest.mark.parametrize("insurance_id", [None, "", "   "])
def test_missing_insurance_id_is_an_error(insurance_id):
    issues = check_required_fields(_claim(insurance_id=insurance_id))

    assert [(i.field, i.severity) for i in issues] == [("insuranceId", "error")]


def test_missing_dob_is_a_warning():
    issues = check_required_fields(_claim(dob=""))

    assert [(i.field, i.severity) for i in issues] == [("dob", "warn")]


def test_rule_issues_keep_declaration_order():
    issues = check_required_fields(_claim(insurance_id=None, dob="", patient_name="", procedure=""))

    assert [(i.field, i.severity) for i in issues] == [
        ("insuranceId", "error"),
        ("dob", "warn"),
        ("patientName", "error"),
        ("procedure", "error"),
    ]


@pytest.mark.asyncio
async def test_llm_notes_become_info_issues_capped_at_three(make_llm):
    llm = make_llm({"consistency issues": {"notes": ["n1", "n2", "n3", "n4"]}})
    logs = []

    result = await verify_claim(_claim(insurance_id=""), llm, logs)

    assert [(i.field, i.severity) for i in result.issues] == [
        ("insuranceId", "error"),
        ("general", "info"),
        ("general", "info"),
        ("general", "info"),
    ]
    assert [i.message for i in result.issues[1:]] == ["n1", "n2", "n3"]
    assert result.normalized == _claim(insurance_id="")


@pytest.mark.asyncio
async def test_failed_llm_call_yields_rule_issues_only(make_llm):
    llm = make_llm({"consistency issues": LLMNetworkError("down")})
    logs = []

    result = await verify_claim(_claim(patient_name=""), llm, logs)

    assert [(i.field, i.severity) for i in result.issues] == [("patientName", "error")]
    assert len(logs) == 1


@pytest.mark.asyncio
async def test_malformed_notes_are_ignored(make_llm):
    llm = make_llm({"consistency issues": {"notes": "not a list"}})

    result = await verify_claim(_claim(), llm, [])

    assert result.issues == []


@pytest.mark.asyncio
async def test_log_entry_records_issues(offline_llm):
    logs = []

    await verify_claim(_claim(procedure=""), offline_llm, logs)

    assert len(logs) == 1
    entry = logs[0]
    assert (entry.agent, entry.step) == ("VerifierAgent", "validate")
    assert entry.data == {"issues": [{"field": "procedure", "message": "Procedure missing.", "severity": "error"}]}


@pytest.mark.asyncio
async def test_deeply_nested_notes_yield_rule_issues_only():
    nested = '{"notes": ' + "[" * 100_000 + "]" * 100_000 + "}"
    llm = LLMClient(chat_model=FakeListChatModel(responses=[nested]))

    result = await verify_claim(_claim(insurance_id=""), llm, [])

    assert [(i.field, i.severity) for i in result.issues] == [("insuranceId", "error")]
