"""
Installer errors.

Services raise these; the install use case turns them into a failed
``InstallResult``. Nothing is rolled back: whatever a failed run
created stays on disk for diagnosis and for a manual resume.
"""

from __future__ import annotations

from pathlib import Path


class InstallError(Exception):
    """Base class for every fatal pipeline condition."""


class PreconditionError(InstallError):
    """Required state is missing or conflicting (tool, path, entry point)."""


class CommandFailedError(InstallError):
    """An external command exited non-zero or could not be started."""

    def __init__(self, command: list[str], return_code: int | None, detail: str = ""):
        self.command = command
        self.return_code = return_code
        self.detail = detail
        rc = f"exit {return_code}" if return_code is not None else "not started"
        message = f"Command failed ({rc}): {' '.join(command)}"
        if detail:
            message += f"\n{detail}"
        super().__init__(message)


class ConfigureFailedError(InstallError):
    """Build configuration still failed after the library-path retry."""

    def __init__(self, first_log: Path, retry_log: Path):
        self.first_log = first_log
        self.retry_log = retry_log
        super().__init__(
            "CMake configuration still failed. See logs:\n"
            f"  {first_log}\n"
            f"  {retry_log}"
        )


class ElevationRequired(InstallError):
    """The run needs administrator rights (Windows MPI installation)."""
