"""
Action and Receipt: an external command the installer wants run, and
what came of it.

Services build Actions and get Receipts back. A failed command is a
Receipt with ``status == "failed"``; whether that aborts the install
is up to the calling service.
"""

from __future__ import annotations

import shlex
from typing import Any, Literal

from pydantic import BaseModel, Field

Status = Literal["ok", "failed"]


class Action(BaseModel):
    """One external command.

    Shell actions carry the full ``argv``. The git and cmake adapters
    assemble their command line from ``params``.
    """

    id: str
    adapter: str
    argv: list[str] = Field(default_factory=list)
    cwd: str | None = None
    log_path: str | None = None     # combined stdout/stderr also written here
    stream: bool = False            # echo lines while they arrive
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def display(self) -> str:
        return shlex.join(self.argv) if self.argv else self.id


class Receipt(BaseModel):
    """Outcome of one Action."""

    adapter: str
    action_id: str
    status: Status = "ok"
    command: list[str] = Field(default_factory=list)
    return_code: int | None = None
    output: str = ""
    error: str | None = None
    duration_ms: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        kwargs.setdefault("return_code", 0)
        return cls(adapter=adapter, action_id=action_id, output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)
