"""Test CPT lookup and justification handling in the coder step."""

import pytest

from agents.coder_agent import CPT_REFERENCE, FALLBACK_JUSTIFICATION, code_claim, lookup_cpt
from schemas.claims import ClaimInput


def test_reference_table_declaration_order():
    assert [ref.code for ref in CPT_REFERENCE] == ["73721", "70551", "72148"]


def test_suggests_code_when_none_supplied():
    assert lookup_cpt("MRI Knee", None) == ("73721", False)


def test_confirms_matching_supplied_code():
    assert lookup_cpt("MRI Knee", "73721") == ("73721", True)


def test_mismatched_code_is_replaced_by_suggestion():
    assert lookup_cpt("  Knee MRI left ", "70551") == ("73721", False)


def test_unknown_supplied_code_falls_back_to_scan():
    assert lookup_cpt("MRI Brain", "99999") == ("70551", False)


def test_no_match_returns_none():
    assert lookup_cpt("X-ray chest", "71046") == (None, False)


def test_lumbar_spine_wording_does_not_match_table():
    # "mri lumbar spine" contains neither "mri spine" nor "lumbar mri"
    assert lookup_cpt("MRI Lumbar Spine", "72148") == (None, False)


def test_first_declared_entry_wins():
    assert lookup_cpt("brain mri after knee mri", None) == ("73721", False)


@pytest.mark.asyncio
async def test_justification_from_llm(make_llm):
    llm = make_llm({"one-sentence justification": {"justification": "73721 covers knee MRI."}})
    claim = ClaimInput(patient_name="John Doe", dob="1975-01-01", procedure="MRI Knee", cpt_code="73721")
    logs = []

    result = await code_claim(claim, llm, logs)

    assert result.suggested_cpt == "73721"
    assert result.valid is True
    assert result.justification == "73721 covers knee MRI."
    assert 'CPT "73721"' in llm.prompts[0]
    assert logs[0].step == "code-validate"
    assert logs[0].data == {"suggested": "73721", "valid": True}


@pytest.mark.asyncio
async def test_justification_falls_back_when_llm_degrades(offline_llm):
    claim = ClaimInput(patient_name="Jane Smith", dob="1982-07-12", procedure="MRI Brain", cpt_code="")

    result = await code_claim(claim, offline_llm, [])

    assert result.suggested_cpt == "70551"
    assert result.valid is False
    assert result.justification == FALLBACK_JUSTIFICATION


@pytest.mark.asyncio
async def test_non_string_justification_uses_fallback(make_llm):
    llm = make_llm({"one-sentence justification": {"justification": 42}})
    claim = ClaimInput(patient_name="A", dob="1990-01-01", procedure="MRI Knee")

    result = await code_claim(claim, llm, [])

    assert result.justification == FALLBACK_JUSTIFICATION


@pytest.mark.asyncio
async def test_empty_justification_is_kept(make_llm):
    llm = make_llm({"one-sentence justification": {"justification": ""}})
    claim = ClaimInput(patient_name="A", dob="1990-01-01", procedure="MRI Knee")

    result = await code_claim(claim, llm, [])

    assert result.justification == ""
