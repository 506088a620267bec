"""
Microsoft MPI provisioning (Windows variant).

Two concerns, kept apart from the pipeline logic:

- privilege: ``has_required_privilege`` is a plain capability check and
  ``relaunch_elevated`` re-invokes the CLI with identical arguments
  under UAC. Only the CLI boundary calls the latter.
- installation: ``install_msmpi`` tries winget first and falls back to
  downloading the runtime and SDK installers and running them silently.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
import tempfile
import urllib.request
from pathlib import Path

from ug4bootstrap.adapters.registry import AdapterRegistry
from ug4bootstrap.core.data.constants import (
    DOWNLOAD_TIMEOUT,
    MSMPI_RUNTIME_URL,
    MSMPI_SDK_URL,
    MSMPI_WINGET_IDS,
)
from ug4bootstrap.core.errors import CommandFailedError, ElevationRequired, InstallError
from ug4bootstrap.core.models.action import Action
from ug4bootstrap.core.observability.logging_config import get_progress_logger
from ug4bootstrap.core.services.commands import run_action, run_checked

logger = logging.getLogger(__name__)
progress = get_progress_logger()


# ── Privilege ───────────────────────────────────────────────────


def has_required_privilege() -> bool:
    """Whether the process may install system software."""
    if sys.platform == "win32":
        import ctypes

        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        except OSError:
            return False
    return os.geteuid() == 0


def relaunch_elevated(argv: list[str]) -> None:
    """Start this CLI again as administrator with the same arguments.

    Returns as soon as the elevated process was launched.

    Raises:
        InstallError: Not on Windows, or the UAC prompt was refused.
    """
    if sys.platform != "win32":
        raise InstallError("Elevated re-launch is only supported on Windows.")
    import ctypes

    params = subprocess.list2cmdline(["-m", "ug4bootstrap.main", *argv])
    progress.info("-> Re-launching elevated: %s %s", sys.executable, params)
    rc = ctypes.windll.shell32.ShellExecuteW(
        None, "runas", sys.executable, params, os.getcwd(), 1
    )
    # ShellExecuteW signals success with a value greater than 32.
    if rc <= 32:
        raise InstallError(f"Could not start an elevated process (ShellExecute code {rc}).")


# ── Installation ────────────────────────────────────────────────


def install_msmpi(registry: AdapterRegistry, download_dir: Path | None = None) -> None:
    """Install the Microsoft MPI runtime and SDK unattended.

    Raises:
        ElevationRequired: The process lacks administrator rights.
        CommandFailedError: Every installation route failed.
    """
    if not has_required_privilege():
        raise ElevationRequired(
            "Installing Microsoft MPI requires administrator rights. "
            "Re-run from an elevated prompt."
        )
    if shutil.which("winget"):
        if _install_with_winget(registry):
            return
        progress.warning("WARNING: winget installation failed; trying direct download.")

    with tempfile.TemporaryDirectory(dir=download_dir) as tmp:
        tmp_dir = Path(tmp)
        runtime = _download(MSMPI_RUNTIME_URL, tmp_dir)
        sdk = _download(MSMPI_SDK_URL, tmp_dir)
        run_checked(
            registry,
            Action(
                id="msmpi-runtime",
                adapter="shell",
                argv=[str(runtime), "-unattend", "-force"],
                cwd=str(tmp_dir),
            ),
        )
        run_checked(
            registry,
            Action(
                id="msmpi-sdk",
                adapter="shell",
                argv=["msiexec", "/i", str(sdk), "/qn", "/norestart"],
                cwd=str(tmp_dir),
            ),
        )
    progress.info("Microsoft MPI installed.")


def _install_with_winget(registry: AdapterRegistry) -> bool:
    for package_id in MSMPI_WINGET_IDS:
        receipt = run_action(
            registry,
            Action(
                id=f"winget-{package_id}",
                adapter="shell",
                argv=[
                    "winget", "install", "--id", package_id, "-e", "--silent",
                    "--accept-package-agreements", "--accept-source-agreements",
                ],
                stream=True,
            ),
        )
        if receipt.failed:
            logger.info("winget install %s failed: %s", package_id, receipt.error)
            return False
    return True


def _download(url: str, dest_dir: Path) -> Path:
    target = dest_dir / url.rsplit("/", 1)[-1]
    progress.info("-> Downloading: %s", url)
    req = urllib.request.Request(url, headers={"User-Agent": "ug4-bootstrap/0.1"})
    try:
        with urllib.request.urlopen(req, timeout=DOWNLOAD_TIMEOUT) as resp, open(target, "wb") as out:
            shutil.copyfileobj(resp, out)
    except OSError as e:
        raise CommandFailedError(["download", url], None, str(e)) from e
    return target
