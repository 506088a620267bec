"""
What every tool adapter implements, and what it is handed per call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict

from ug4bootstrap.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """One dispatch of an Action, with the sink for its live output."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    action: Action
    echo: Callable[[str], None] | None = None  # live line sink for streamed output

    @property
    def working_dir(self) -> str:
        return self.action.cwd or "."


class Adapter(ABC):
    """Binding for one external tool (shell, git, cmake).

    ``execute`` reports failure through the Receipt and does not raise;
    the registry still guards against adapters that do.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry key; matches ``Action.adapter``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the tool can be found on this machine."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Check the action before running it: ``(ok, reason)``."""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Run the action."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"
