"""
LLM client: JSON completions over langchain-openai ChatOpenAI.

Every agent talks to the model through `complete(prompt) -> dict`:
  - one outbound call per invocation (no retry, no timeout, no rate limiting)
  - the text completion is searched for a JSON object: a ```json fenced block
    first, then the span from the first '{' to the last '}'

Optional calls (verifier notes, coder justification, reviewer rationale, recap)
go through `enrich()`, which returns an Enrichment instead of raising. Callers
branch on `enrichment.degraded` and substitute their own fallback.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage
from langchain_openai import ChatOpenAI
from langsmith import traceable

from config.settings import Settings
from schemas.errors import LLMError, LLMNetworkError, LLMParseError

logger = logging.getLogger(__name__)

_JSON_FENCE_RE = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)


class CompletionClient(Protocol):
    async def complete(self, prompt: str) -> dict[str, Any]: ...


# ---------------------------------------------------------------------------
# JSON extraction
# ---------------------------------------------------------------------------


def extract_json(text: str) -> dict[str, Any]:
    """Pull a JSON object out of a (possibly markdown-fenced) completion."""
    text = (text or "").strip()
    match = _JSON_FENCE_RE.search(text)
    candidate = match.group(1) if match else text

    try:
        parsed = json.loads(candidate)
    except (json.JSONDecodeError, RecursionError):
        start = candidate.find("{")
        end = candidate.rfind("}")
        if start == -1 or end <= start:
            raise LLMParseError("LLM did not return valid JSON")
        try:
            parsed = json.loads(candidate[start : end + 1])
        except (json.JSONDecodeError, RecursionError) as e:
            raise LLMParseError(f"LLM did not return valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise LLMParseError(f"LLM returned JSON {type(parsed).__name__}, expected an object")
    return parsed


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class LLMClient:
    """Thin async wrapper around a LangChain chat model returning JSON objects."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o",
        temperature: float = 0.0,
        chat_model: Optional[BaseChatModel] = None,
    ) -> None:
        self.model = model
        self._llm = chat_model or ChatOpenAI(model=model, temperature=temperature, api_key=api_key)

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMClient":
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            temperature=settings.llm_temperature,
        )

    @traceable(name="llm_complete_json")
    async def complete(self, prompt: str) -> dict[str, Any]:
        try:
            response = await self._llm.ainvoke([HumanMessage(content=prompt)])
        except Exception as e:
            raise LLMNetworkError(f"LLM call failed: {e}") from e

        content = response.content if hasattr(response, "content") else str(response)
        if not isinstance(content, str):
            content = str(content)
        return extract_json(content)


# ---------------------------------------------------------------------------
# Optional enrichment
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Enrichment:
    """Either the JSON payload of an enrichment call or a degraded marker."""

    payload: Optional[dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.payload is None

    def text(self, key: str) -> Optional[str]:
        value = (self.payload or {}).get(key)
        return value if isinstance(value, str) else None

    def strings(self, key: str, limit: int) -> Optional[list[str]]:
        value = (self.payload or {}).get(key)
        if not isinstance(value, list):
            return None
        return [str(v) for v in value[:limit]]


async def enrich(llm: CompletionClient, prompt: str, purpose: str) -> Enrichment:
    """Run an optional completion; LLM failures become a degraded Enrichment."""
    try:
        payload = await llm.complete(prompt)
    except LLMError as e:
        logger.warning("%s enrichment degraded: %s", purpose, e)
        return Enrichment(error=str(e))
    return Enrichment(payload=payload)
