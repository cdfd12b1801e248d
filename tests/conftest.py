"""Pytest configuration and shared fixtures."""

from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.routes.workflow import get_llm_client
from schemas.errors import LLMParseError

# Prompt markers, one per LLM call site.
EXTRACTION = "strict JSON parser"
CONSISTENCY = "consistency issues"
JUSTIFICATION = "one-sentence justification"
RATIONALE = "estimate denial risk"
RECAP = "non-technical recap"


class ScriptedLLM:
    """Fake completion client answering by the first marker found in the prompt.

    A scripted value that is an exception instance is raised instead of
    returned. Prompts without a scripted marker raise LLMParseError, which
    degrades every optional enrichment.
    """

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.responses = responses or {}
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> dict[str, Any]:
        self.prompts.append(prompt)
        for marker, outcome in self.responses.items():
            if marker in prompt:
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome
        raise LLMParseError("LLM did not return valid JSON")


@pytest.fixture
def make_llm() -> Callable[..., ScriptedLLM]:
    """Factory for scripted LLM clients."""
    return ScriptedLLM


@pytest.fixture
def offline_llm() -> ScriptedLLM:
    """LLM whose every call fails; all enrichment falls back."""
    return ScriptedLLM()


@pytest.fixture
def happy_llm() -> ScriptedLLM:
    """LLM that answers every enrichment call."""
    return ScriptedLLM(
        {
            CONSISTENCY: {"notes": []},
            JUSTIFICATION: {"justification": "The procedure matches the CPT description."},
            RATIONALE: {"rationale": "All required fields are present."},
            RECAP: {"text": "Claim processed."},
        }
    )


@pytest.fixture
def john_doe_claim() -> dict[str, Any]:
    return {
        "patientName": "John Doe",
        "dob": "01/01/1975",
        "insuranceId": "",
        "procedure": "MRI Knee",
        "cptCode": "73721",
    }


@pytest.fixture
def aaron_lee_claim() -> dict[str, Any]:
    return {
        "patientName": "Aaron Lee",
        "dob": "1979-11-02",
        "insuranceId": "ZX-991144",
        "procedure": "MRI Lumbar Spine",
        "cptCode": "72148",
    }


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    """Ensure FastAPI dependency overrides are reset between tests."""
    app.dependency_overrides = {}
    yield
    app.dependency_overrides = {}


@pytest.fixture
def client_with() -> Callable[[Any], TestClient]:
    """Return a TestClient whose run endpoint uses the given LLM."""

    def _build(llm: Any) -> TestClient:
        app.dependency_overrides[get_llm_client] = lambda: llm
        return TestClient(app)

    return _build
