"""
Scriptable stand-in for the git, shell and cmake adapters.

Lets the full install pipeline run in tests without network access,
ughub or a compiler. Register one under the real adapter name and
script it per action ID.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from ug4bootstrap.adapters.base import Adapter, ExecutionContext
from ug4bootstrap.core.models.action import Receipt

# May return a Receipt to override the scripted one
Hook = Callable[[ExecutionContext], "Receipt | None"]


class MockAdapter(Adapter):
    """Records every call and answers from a script.

    For an action ID the answer is, in order: what its hook returns,
    the receipt given to ``set_response``/``set_failure``, or a plain
    success. Hooks also leave behind files a real tool would create
    (the ``clone`` hook makes the checkout directory). If the action
    names a ``log_path``, the answer's output is written there.
    """

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "[mock] executed",
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._scripted: dict[str, Receipt] = {}
        self._hooks: dict[str, Hook] = {}
        self.call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_count(self) -> int:
        return len(self.call_log)

    @property
    def called_ids(self) -> list[str]:
        return [ctx.action.id for ctx in self.call_log]

    def is_available(self) -> bool:
        return self._available

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        self._scripted[action_id] = receipt

    def set_failure(
        self,
        action_id: str,
        error: str = "Mock failure",
        output: str = "",
        return_code: int = 1,
    ) -> None:
        self.set_response(
            action_id,
            Receipt.failure(
                adapter=self._name,
                action_id=action_id,
                error=error,
                output=output,
                return_code=return_code,
            ),
        )

    def set_hook(self, action_id: str, hook: Hook) -> None:
        self._hooks[action_id] = hook

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def _answer(self, context: ExecutionContext) -> Receipt:
        action_id = context.action.id
        hook = self._hooks.get(action_id)
        receipt = hook(context) if hook else None
        if receipt is None:
            receipt = self._scripted.get(action_id)
        if receipt is None:
            receipt = Receipt.success(
                adapter=self._name,
                action_id=action_id,
                output=self._default_output,
                metadata={"mock": True},
            )
        return receipt

    def execute(self, context: ExecutionContext) -> Receipt:
        self.call_log.append(context)
        receipt = self._answer(context)
        action = context.action
        if action.log_path:
            log = Path(action.log_path)
            log.parent.mkdir(parents=True, exist_ok=True)
            log.write_text(receipt.output, encoding="utf-8")
        return receipt.model_copy(update={"command": list(action.argv)})

    def reset(self) -> None:
        """Forget calls, hooks and scripted receipts."""
        self.call_log.clear()
        self._scripted.clear()
        self._hooks.clear()
