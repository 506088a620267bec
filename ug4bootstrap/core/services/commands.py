"""
Command helpers shared by the pipeline steps.

Every external command is announced on the progress channel before it
runs. ``run_checked`` turns a failed receipt into a ``CommandFailedError``,
the "first failure halts the pipeline" rule; ``run_action`` leaves the
decision to the caller (the build configurator classifies instead).
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ug4bootstrap.adapters.registry import AdapterRegistry
from ug4bootstrap.core.errors import CommandFailedError
from ug4bootstrap.core.models.action import Action, Receipt
from ug4bootstrap.core.observability.logging_config import get_progress_logger

logger = logging.getLogger(__name__)
progress = get_progress_logger()

Echo = Callable[[str], None]

# Lines of captured output quoted in a failure message.
_FAILURE_TAIL_LINES = 20


def run_action(
    registry: AdapterRegistry,
    action: Action,
    echo: Echo | None = None,
) -> Receipt:
    """Announce and execute an action; return its receipt whatever the outcome."""
    progress.info("-> Running: %s", action.display)
    receipt = registry.execute_action(action, echo=echo)
    logger.debug(
        "%s finished: status=%s rc=%s (%dms)",
        action.id, receipt.status, receipt.return_code, receipt.duration_ms,
    )
    return receipt


def run_checked(
    registry: AdapterRegistry,
    action: Action,
    echo: Echo | None = None,
) -> Receipt:
    """Execute an action and raise ``CommandFailedError`` if it failed."""
    receipt = run_action(registry, action, echo=echo)
    if receipt.failed:
        raise CommandFailedError(
            receipt.command or list(action.argv),
            receipt.return_code,
            _failure_detail(receipt, streamed=action.stream),
        )
    return receipt


def _failure_detail(receipt: Receipt, streamed: bool) -> str:
    parts: list[str] = []
    if receipt.error:
        parts.append(receipt.error)
    if receipt.output and not streamed:
        tail = receipt.output.rstrip("\n").splitlines()[-_FAILURE_TAIL_LINES:]
        parts.extend(f"  │ {line}" for line in tail)
    return "\n".join(parts)
