# -*- coding: utf-8 -*-
"""
Result shapes shared by every tool.

- Step: the value-or-failure carried between the stages of a call chain.
- run_chain: runs stages in order, stopping at the first failure.
- Envelope: what a tool handler hands back (display text + structured form).
"""

import json
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar

from fastmcp.tools.tool import ToolResult
from pydantic import BaseModel

T = TypeVar("T")


@dataclass(frozen=True)
class Step(Generic[T]):
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Step[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, reason: str) -> "Step[T]":
        return cls(error=reason)


async def run_chain(initial: Any, *stages: Callable[[Any], Awaitable[Step]]) -> Step:
    """
    Feed `initial` through `stages`; each stage receives the previous stage's
    value and only runs if that stage succeeded.
    """
    current: Step = Step.success(initial)
    for stage in stages:
        current = await stage(current.value)
        if not current.ok:
            return current
    return current


# -----------------------------------------------------------------------------
# Output schemas published with each tool
# -----------------------------------------------------------------------------
class AlertsOutput(BaseModel):
    alerts: str


class ForecastOutput(BaseModel):
    forecast: str


class CurrentUserOutput(BaseModel):
    authenticated: bool
    user: Optional[Dict[str, Any]] = None
    message: Optional[str] = None


# -----------------------------------------------------------------------------
# Envelope
# -----------------------------------------------------------------------------
STRUCTURED = "structured"
TEXT = "text"
FAILURE = "failure"


@dataclass(frozen=True)
class Envelope:
    kind: str
    text: str
    structured: Dict[str, Any] = field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return self.kind == FAILURE

    @classmethod
    def text_block(cls, key: str, text: str) -> "Envelope":
        """Human-readable success; the structured form holds the same text under `key`."""
        return cls(TEXT, text, {key: text})

    @classmethod
    def failure(cls, key: str, message: str) -> "Envelope":
        return cls(FAILURE, message, {key: message})

    @classmethod
    def from_model(cls, model: BaseModel, failed: bool = False) -> "Envelope":
        payload = model.model_dump(exclude_none=True)
        return cls(FAILURE if failed else STRUCTURED, json.dumps(payload, indent=2), payload)

    def to_tool_result(self) -> ToolResult:
        return ToolResult(content=self.text, structured_content=self.structured)
