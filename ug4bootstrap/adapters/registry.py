"""
Adapter registry: name -> adapter lookup and the one place Actions run.

Services hand every git, ughub and cmake invocation to
``execute_action``; they never hold an adapter themselves. Tests swap
behaviour by registering a ``MockAdapter`` under the real name.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from ug4bootstrap.adapters.base import Adapter, ExecutionContext
from ug4bootstrap.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


def _refuse(action: Action, error: str) -> Receipt:
    return Receipt.failure(
        adapter=action.adapter,
        action_id=action.id,
        error=error,
        command=list(action.argv),
    )


class AdapterRegistry:
    """Holds the tool adapters for one install run."""

    def __init__(self):
        self._adapters: dict[str, Adapter] = {}

    # ── Lookup ──────────────────────────────────────────────────────

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._adapters:
            logger.warning("Replacing adapter %r", adapter.name)
        self._adapters[adapter.name] = adapter
        logger.debug("Adapter %r registered (%s)", adapter.name, type(adapter).__name__)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def list_adapters(self) -> list[str]:
        return sorted(self._adapters)

    def is_available(self, name: str) -> bool:
        """True when ``name`` is registered and its tool can be found."""
        adapter = self._adapters.get(name)
        if adapter is None:
            return False
        try:
            return adapter.is_available()
        except Exception as e:
            logger.debug("Availability probe for %r raised: %s", name, e)
            return False

    def adapter_status(self) -> dict[str, dict[str, Any]]:
        """Per-adapter availability, for ``--debug`` output."""
        status: dict[str, dict[str, Any]] = {}
        for name in self.list_adapters():
            status[name] = {
                "available": self.is_available(name),
                "type": type(self._adapters[name]).__name__,
            }
        return status

    # ── Dispatch ────────────────────────────────────────────────────

    def execute_action(
        self,
        action: Action,
        echo: Callable[[str], None] | None = None,
    ) -> Receipt:
        """Run ``action`` and return its Receipt; this method never raises.

        The adapter validates first. An invalid action, a missing
        adapter or an adapter that raises all come back as a failed
        Receipt. ``echo`` receives output lines of streaming actions.
        """
        started = time.monotonic()
        adapter = self._adapters.get(action.adapter)
        if adapter is None:
            return _refuse(action, f"No adapter registered for '{action.adapter}'")

        context = ExecutionContext(action=action, echo=echo)
        try:
            valid, reason = adapter.validate(context)
        except Exception as e:
            valid, reason = False, f"validator raised {e}"
        if not valid:
            return _refuse(action, f"Validation failed: {reason}")

        try:
            receipt = adapter.execute(context)
        except Exception as e:
            logger.error("Adapter %r raised on %s: %s", action.adapter, action.id, e)
            receipt = _refuse(action, f"Unexpected error: {e}")

        receipt.duration_ms = int((time.monotonic() - started) * 1000)
        return receipt


def default_registry() -> AdapterRegistry:
    """Registry wired with the real shell, git and cmake adapters."""
    from ug4bootstrap.adapters.build.cmake import CMakeAdapter
    from ug4bootstrap.adapters.shell.command import ShellCommandAdapter
    from ug4bootstrap.adapters.vcs.git import GitAdapter

    registry = AdapterRegistry()
    for adapter in (ShellCommandAdapter(), GitAdapter(), CMakeAdapter()):
        registry.register(adapter)
    return registry
