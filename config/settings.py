"""
Runtime settings, read once at process start.

Values come from the environment (optionally a local .env file). The
resulting Settings object is handed explicitly to the LLM client; nothing
else reads the credential.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from schemas.errors import ConfigurationError

_DEFAULT_MODEL = "gpt-4o"


@dataclass(frozen=True)
class Settings:
    openai_api_key: str
    openai_model: str = _DEFAULT_MODEL
    llm_temperature: float = 0.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the environment; raise if the API key is absent."""
        load_dotenv()

        api_key = os.getenv("OPENAI_API_KEY", "").strip()
        if not api_key:
            raise ConfigurationError("Missing OPENAI_API_KEY. Set it in the environment or .env")

        return cls(
            openai_api_key=api_key,
            openai_model=os.getenv("OPENAI_MODEL", _DEFAULT_MODEL),
            llm_temperature=float(os.getenv("LLM_TEMPERATURE", "0")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


def langsmith_enabled() -> bool:
    """True when LangSmith tracing is switched on and a key is configured."""
    return (
        os.getenv("LANGSMITH_TRACING", "").lower() == "true"
        and bool(os.getenv("LANGSMITH_API_KEY", "").strip())
    )
