"""
Shell command adapter: run a command line and capture its output.

The most fundamental adapter: the package-manager sub-commands go
through it directly, and the git and cmake adapters build on it.

Two modes:
    - capture: output collected and returned in the receipt.
    - stream: each line is echoed live (``context.echo``) while also
      being collected, and optionally written to ``action.log_path``
      (the ``cmd 2>&1 | tee file`` pattern).

There is no timeout: clones and builds legitimately run for a long time.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from pathlib import Path

from ug4bootstrap.adapters.base import Adapter, ExecutionContext
from ug4bootstrap.core.models.action import Receipt

logger = logging.getLogger(__name__)


class ShellCommandAdapter(Adapter):
    """Execute ``action.argv`` and capture output."""

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return True  # argv is executed directly, no shell needed

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        argv = context.action.argv
        if not argv:
            return False, "Missing command (empty argv)"

        program = argv[0]
        if "/" not in program and "\\" not in program and shutil.which(program) is None:
            return False, f"Command not found on PATH: {program}"

        cwd = context.action.cwd
        if cwd and not Path(cwd).is_dir():
            return False, f"Working directory does not exist: {cwd}"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        return self.run(context, context.action.argv)

    def run(self, context: ExecutionContext, argv: list[str]) -> Receipt:
        """Run ``argv`` for ``context.action`` and build the receipt."""
        action = context.action
        logger.debug("Executing: %s (cwd=%s)", argv, context.working_dir)
        start = time.monotonic()

        try:
            if action.stream or action.log_path:
                return_code, output = self._run_streaming(context, argv)
            else:
                result = subprocess.run(
                    argv,
                    cwd=action.cwd,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    text=True,
                )
                return_code, output = result.returncode, result.stdout or ""
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=action.id,
                error=f"Command execution error: {e}",
                command=argv,
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        metadata = {"log_path": action.log_path} if action.log_path else {}

        if return_code == 0:
            return Receipt.success(
                adapter=self.name,
                action_id=action.id,
                output=output,
                command=argv,
                return_code=0,
                duration_ms=elapsed_ms,
                metadata=metadata,
            )
        return Receipt.failure(
            adapter=self.name,
            action_id=action.id,
            error=f"Command exited with code {return_code}",
            output=output,
            command=argv,
            return_code=return_code,
            duration_ms=elapsed_ms,
            metadata=metadata,
        )

    def _run_streaming(self, context: ExecutionContext, argv: list[str]) -> tuple[int, str]:
        """Run with combined stdout/stderr, echoing and teeing line by line."""
        action = context.action
        lines: list[str] = []
        log_file = None
        if action.log_path:
            Path(action.log_path).parent.mkdir(parents=True, exist_ok=True)
            log_file = open(action.log_path, "w", encoding="utf-8")

        try:
            with subprocess.Popen(
                argv,
                cwd=action.cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                bufsize=1,
            ) as proc:
                assert proc.stdout is not None
                for line in proc.stdout:
                    lines.append(line)
                    if log_file is not None:
                        log_file.write(line)
                        log_file.flush()
                    if action.stream and context.echo is not None:
                        context.echo(line.rstrip("\n"))
                return_code = proc.wait()
        finally:
            if log_file is not None:
                log_file.close()

        return return_code, "".join(lines)
