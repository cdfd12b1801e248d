"""Audit-trail entries appended by each agent."""

from __future__ import annotations

import time
from typing import Any

from pydantic import BaseModel

from schemas.claims import AgentLog


def _jsonable(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True)
    if isinstance(data, dict):
        return {k: _jsonable(v) for k, v in data.items()}
    if isinstance(data, (list, tuple)):
        return [_jsonable(v) for v in data]
    return data


def log_entry(agent: str, step: str, detail: str, data: Any = None) -> AgentLog:
    return AgentLog(
        agent=agent,
        step=step,
        detail=detail,
        data=_jsonable(data),
        ts=int(time.time() * 1000),
    )
