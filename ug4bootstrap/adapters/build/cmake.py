"""
CMake adapter: build-system configuration.

Runs ``cmake <options> <source>`` from the build directory. Output is
always streamed and, when the action names a log file, teed into it so
the configurator can classify the run afterwards.
"""

from __future__ import annotations

import shutil

from ug4bootstrap.adapters.base import ExecutionContext
from ug4bootstrap.adapters.shell.command import ShellCommandAdapter
from ug4bootstrap.core.models.action import Receipt


class CMakeAdapter(ShellCommandAdapter):
    """Configure a CMake build tree.

    Action params:
        options (list[str]): ``-DKEY=VALUE`` tokens, passed verbatim.
        source (str): Source directory relative to cwd (default: '..').
    """

    @property
    def name(self) -> str:
        return "cmake"

    def is_available(self) -> bool:
        return shutil.which("cmake") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        if not context.action.cwd:
            return False, "Missing build directory (action.cwd)"
        if not self.is_available():
            return False, "cmake is not installed"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        argv = context.action.argv or self.build_argv(context.action.params)
        return self.run(context, argv)

    @staticmethod
    def build_argv(params: dict) -> list[str]:
        return ["cmake", *params.get("options", []), params.get("source", "..")]
