"""
Git adapter: version control operations.

Provides the two git operations the installer needs (clone, remote)
through the adapter protocol. Uses the git CLI, not a library binding.
"""

from __future__ import annotations

import logging
import shutil

from ug4bootstrap.adapters.base import ExecutionContext
from ug4bootstrap.adapters.shell.command import ShellCommandAdapter
from ug4bootstrap.core.models.action import Receipt

logger = logging.getLogger(__name__)


class GitAdapter(ShellCommandAdapter):
    """Git version control operations.

    Action params:
        operation (str): One of 'clone', 'remote'.
        url (str): Repository to clone (for 'clone').
        dest (str): Clone destination (for 'clone').
        depth (int): Shallow clone depth (for 'clone', optional).
        branch (str): Branch to check out (for 'clone', optional).
        repo (str): Repository directory (for 'remote').
    """

    @property
    def name(self) -> str:
        return "git"

    def is_available(self) -> bool:
        return shutil.which("git") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.action.params
        operation = params.get("operation", "")
        if not operation:
            return False, "Missing required param: 'operation'"

        valid_ops = {"clone", "remote"}
        if operation not in valid_ops:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(valid_ops))}"

        if operation == "clone":
            if not params.get("url"):
                return False, "Missing required param: 'url' for clone operation"
            if not params.get("dest"):
                return False, "Missing required param: 'dest' for clone operation"
        if operation == "remote" and not params.get("repo"):
            return False, "Missing required param: 'repo' for remote operation"

        if not self.is_available():
            return False, "git is not installed"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        argv = context.action.argv or self.build_argv(context.action.params)
        return self.run(context, argv)

    @staticmethod
    def build_argv(params: dict) -> list[str]:
        """The git command line for an operation's params."""
        operation = params["operation"]
        if operation == "clone":
            argv = ["git", "clone"]
            if params.get("depth"):
                argv += ["--depth", str(params["depth"])]
            if params.get("branch"):
                argv += ["--branch", params["branch"]]
            return argv + [params["url"], params["dest"]]
        return ["git", "-C", params["repo"], "remote", "-v"]
