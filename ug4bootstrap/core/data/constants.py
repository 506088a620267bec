"""
Module-level constants.

Pure data. No logic. No imports beyond stdlib.
"""

from __future__ import annotations

# ── Layout ──────────────────────────────────────────────────────

# Name the workspace expects the package-manager clone to have. The
# workspace reaches the entry point through ``../ughub/ughub``.
EXPECTED_CLONE_NAME = "ughub"
DEFAULT_TARGET_DIR = EXPECTED_CLONE_NAME
WORKSPACE_NAME = "ug4"
ENTRY_POINT_NAME = "ughub"
RELATIVE_ENTRY_POINT = f"../{EXPECTED_CLONE_NAME}/{ENTRY_POINT_NAME}"

PLUGINS_DIR_NAME = "plugins"
APPS_DIR_NAME = "apps"
BUILD_DIR_NAME = "build"

FIRST_CONFIGURE_LOG = "cmake_first.log"
RETRY_CONFIGURE_LOG = "cmake_with_blas_lapack.log"

# ── Upstream ────────────────────────────────────────────────────

UGHUB_HTTPS_URL = "https://github.com/UG4/ughub.git"
UGHUB_SSH_URL = "git@github.com:UG4/ughub.git"

# ── Environment overrides ───────────────────────────────────────

ENV_USE_SSH = "USE_SSH"
ENV_CLONE_DEPTH = "CLONE_DEPTH"
ENV_REPO_URL = "UGHUB_REPO_URL"
ENV_BRANCH = "UGHUB_BRANCH"
ENV_LAPACK_LIB = "LAPACK_LIB_OVERRIDE"
ENV_BLAS_LIB = "BLAS_LIB_OVERRIDE"

ENV_LOG_LEVEL = "UG4_LOG_LEVEL"
ENV_LOG_FILE = "UG4_LOG_FILE"
ENV_LOG_FILE_LEVEL = "UG4_LOG_FILE_LEVEL"

# ── Toolchain probing ───────────────────────────────────────────

MPI_COMPILER_PAIRS: tuple[tuple[str, str], ...] = (("mpicc", "mpicxx"),)
MPI_FALLBACK_DIR = "/usr/bin"

# Two tiers, first complete pair wins.
GENERIC_COMPILER_PAIRS: tuple[tuple[str, str], ...] = (
    ("gcc", "g++"),
    ("cc", "c++"),
)

WINDOWS_GENERIC_COMPILER_PAIRS: tuple[tuple[str, str], ...] = (
    ("gcc", "g++"),
    ("cl", "cl"),
)

# Interpreters tried when the entry point is not directly executable.
FALLBACK_INTERPRETERS: tuple[str, ...] = ("python3", "python")

# ── Microsoft MPI (Windows variant) ─────────────────────────────

MSMPI_BIN_DIR = r"C:\Program Files\Microsoft MPI\Bin"
MSMPI_WINGET_IDS: tuple[str, ...] = ("Microsoft.msmpi", "Microsoft.msmpisdk")
MSMPI_RUNTIME_URL = (
    "https://github.com/microsoft/Microsoft-MPI/releases/download/v10.1.1/msmpisetup.exe"
)
MSMPI_SDK_URL = (
    "https://github.com/microsoft/Microsoft-MPI/releases/download/v10.1.1/msmpisdk.msi"
)
DOWNLOAD_TIMEOUT = 120
