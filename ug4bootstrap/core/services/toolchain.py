"""
Toolchain resolver: pick the C/C++ compiler pair for the build.

With MPI requested, MPI compiler wrappers are probed first (PATH, then
a fixed fallback directory). Otherwise, or when they are missing, the
generic compilers are probed in two tiers. A missing MPI toolchain is a
degradation (warning, PARALLEL=OFF), a missing generic toolchain is
fatal.

On Windows, MPI means the Microsoft MPI runtime (``mpiexec``) next to
the generic compilers; an optional installer callback can fetch it
when it is absent.
"""

from __future__ import annotations

import logging
import os
import platform
import shutil
from collections.abc import Callable
from pathlib import Path

from ug4bootstrap.core.data.constants import (
    GENERIC_COMPILER_PAIRS,
    MPI_COMPILER_PAIRS,
    MPI_FALLBACK_DIR,
    MSMPI_BIN_DIR,
    WINDOWS_GENERIC_COMPILER_PAIRS,
)
from ug4bootstrap.core.errors import PreconditionError
from ug4bootstrap.core.models.install import ToolchainSelection
from ug4bootstrap.core.observability.logging_config import get_progress_logger

logger = logging.getLogger(__name__)
progress = get_progress_logger()

Which = Callable[[str], "str | None"]


def is_windows(platform_name: str | None = None) -> bool:
    return (platform_name or platform.system()) == "Windows"


def is_executable_file(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def probe_tool(
    name: str,
    fallback_dir: str | None = None,
    which: Which = shutil.which,
    is_executable: Callable[[Path], bool] = is_executable_file,
) -> str | None:
    """Locate ``name`` on PATH, then in ``fallback_dir``."""
    found = which(name)
    if found:
        return found
    if fallback_dir:
        candidate = Path(fallback_dir) / name
        if is_executable(candidate):
            return str(candidate)
    return None


def probe_pair(
    pairs: tuple[tuple[str, str], ...],
    fallback_dir: str | None = None,
    which: Which = shutil.which,
    is_executable: Callable[[Path], bool] = is_executable_file,
) -> tuple[str, str] | None:
    """First (C, C++) pair whose both members resolve."""
    for c_name, cxx_name in pairs:
        c_path = probe_tool(c_name, fallback_dir, which, is_executable)
        cxx_path = probe_tool(cxx_name, fallback_dir, which, is_executable)
        if c_path and cxx_path:
            return c_path, cxx_path
        logger.debug("Incomplete pair %s/%s: %s, %s", c_name, cxx_name, c_path, cxx_path)
    return None


def probe_msmpi(
    which: Which = shutil.which,
    is_executable: Callable[[Path], bool] = is_executable_file,
) -> str | None:
    """Locate the Microsoft MPI launcher."""
    return probe_tool("mpiexec", MSMPI_BIN_DIR, which, is_executable) or probe_tool(
        "mpiexec.exe", MSMPI_BIN_DIR, which, is_executable
    )


def resolve_toolchain(
    mpi_requested: bool,
    platform_name: str | None = None,
    which: Which = shutil.which,
    is_executable: Callable[[Path], bool] = is_executable_file,
    install_mpi: Callable[[], None] | None = None,
) -> ToolchainSelection:
    """Select the compiler pair.

    Args:
        mpi_requested: Whether the run asked for a parallel build.
        platform_name: ``platform.system()`` override (tests).
        which: PATH lookup (default: ``shutil.which``).
        is_executable: Check for fallback-directory candidates.
        install_mpi: Windows only. Called when MPI is requested but
            missing; it installs Microsoft MPI or raises.

    Raises:
        PreconditionError: No complete generic compiler pair was found,
            or MPI is still missing after ``install_mpi`` ran.
    """
    progress.info("Part 7/9: Selecting compilers")
    windows = is_windows(platform_name)

    if mpi_requested:
        progress.info("MPI mode requested (-mpi). Searching for MPI compilers...")
        if windows:
            selection = _resolve_windows_mpi(which, is_executable, install_mpi)
            if selection is not None:
                return selection
        else:
            pair = probe_pair(MPI_COMPILER_PAIRS, MPI_FALLBACK_DIR, which, is_executable)
            if pair is not None:
                progress.info("  Found MPI compilers:")
                progress.info("    mpicc : %s", pair[0])
                progress.info("    mpicxx: %s", pair[1])
                return ToolchainSelection(c_compiler=pair[0], cxx_compiler=pair[1], parallel=True)
        progress.warning("WARNING: MPI compilers not found. Falling back to non-MPI toolchain.")

    tiers = WINDOWS_GENERIC_COMPILER_PAIRS if windows else GENERIC_COMPILER_PAIRS
    pair = probe_pair(tiers, None, which, is_executable)
    if pair is None:
        names = " or ".join(f"{c}/{cxx}" for c, cxx in tiers)
        raise PreconditionError(f"Could not find a C/C++ compiler toolchain ({names}).")

    if mpi_requested:
        progress.warning("MPI not available; proceeding without MPI (PARALLEL=OFF).")
    progress.info("  Using fallback compilers:")
    progress.info("    C  : %s", pair[0])
    progress.info("    C++: %s", pair[1])
    return ToolchainSelection(
        c_compiler=pair[0],
        cxx_compiler=pair[1],
        parallel=False,
        degraded=mpi_requested,
    )


def _resolve_windows_mpi(
    which: Which,
    is_executable: Callable[[Path], bool],
    install_mpi: Callable[[], None] | None,
) -> ToolchainSelection | None:
    mpiexec = probe_msmpi(which, is_executable)
    if mpiexec is None and install_mpi is not None:
        progress.info("  Microsoft MPI not found; installing it.")
        install_mpi()
        mpiexec = probe_msmpi(which, is_executable)
        if mpiexec is None:
            raise PreconditionError(
                f"Microsoft MPI installation finished but mpiexec was not found "
                f"on PATH or in {MSMPI_BIN_DIR}."
            )
    if mpiexec is None:
        return None

    pair = probe_pair(WINDOWS_GENERIC_COMPILER_PAIRS, None, which, is_executable)
    if pair is None:
        return None
    progress.info("  Found Microsoft MPI: %s", mpiexec)
    progress.info("    C  : %s", pair[0])
    progress.info("    C++: %s", pair[1])
    return ToolchainSelection(c_compiler=pair[0], cxx_compiler=pair[1], parallel=True)
