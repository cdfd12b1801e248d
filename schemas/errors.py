"""Error taxonomy for the claim workflow."""

from __future__ import annotations


class ClaimPipelineError(Exception):
    """Base class for failures raised while running the workflow."""


class ClaimValidationError(ClaimPipelineError):
    """Input or internally assembled data does not satisfy its contract."""


class LLMError(ClaimPipelineError):
    """Base class for generative-text service failures."""


class LLMParseError(LLMError):
    """The completion did not contain a usable JSON object."""


class LLMNetworkError(LLMError):
    """The call to the generative-text service failed."""


class ConfigurationError(RuntimeError):
    """Required settings are missing at startup."""
