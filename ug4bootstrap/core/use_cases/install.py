"""
Install use case: run the bootstrap pipeline end to end.

This is the top-level orchestrator: fetch ughub, build the workspace,
install packages, vendor external sources, pick a toolchain and
configure the build. Each step receives the explicit paths it works
on; the first ``InstallError`` ends the run and lands in the result.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from ug4bootstrap.adapters.registry import AdapterRegistry, default_registry
from ug4bootstrap.core.errors import InstallError
from ug4bootstrap.core.models.install import (
    BuildOptionSet,
    InstallConfig,
    ToolchainSelection,
    WorkspacePaths,
)
from ug4bootstrap.core.models.profile import BuildProfile
from ug4bootstrap.core.observability.logging_config import get_progress_logger
from ug4bootstrap.core.services.commands import Echo
from ug4bootstrap.core.services.configure import ConfigureResult, configure_build
from ug4bootstrap.core.services.fetcher import fetch_repository
from ug4bootstrap.core.services.packages import install_packages
from ug4bootstrap.core.services.toolchain import (
    Which,
    is_executable_file,
    is_windows,
    probe_msmpi,
    resolve_toolchain,
)
from ug4bootstrap.core.services.vendoring import (
    parmetis_bundle,
    superlu_bundle,
    superlu_external_dir,
    vendor_archive,
    vendor_clone,
)
from ug4bootstrap.core.services.workspace import build_workspace

logger = logging.getLogger(__name__)
progress = get_progress_logger()


@dataclass
class InstallResult:
    """Result of one bootstrap run."""

    config: InstallConfig
    paths: WorkspacePaths | None = None
    packages: list[str] = field(default_factory=list)
    toolchain: ToolchainSelection | None = None
    configure: ConfigureResult | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def options(self) -> BuildOptionSet | None:
        return self.configure.options if self.configure else None

    @property
    def features(self) -> dict[str, str]:
        parallel = self.toolchain.parallel if self.toolchain else False
        return self.config.feature_summary(parallel)

    def summary_line(self) -> str:
        states = ", ".join(f"{k}={v}" for k, v in self.features.items())
        return f"All done. ug4 initialized and CMake configured ({states})."

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
            return result

        if self.paths:
            result["clone_dir"] = str(self.paths.clone_dir)
            result["workspace_dir"] = str(self.paths.workspace_dir)
        result["packages"] = list(self.packages)
        if self.toolchain:
            result["toolchain"] = {
                "c": self.toolchain.c_compiler,
                "cxx": self.toolchain.cxx_compiler,
                "parallel": self.toolchain.parallel,
                "degraded": self.toolchain.degraded,
            }
        if self.configure:
            result["configure"] = {
                "attempts": self.configure.attempts,
                "options": self.configure.options.to_args(),
                "logs": [str(p) for p in self.configure.log_paths],
            }
        result["features"] = self.features
        return result


def needs_elevation(
    config: InstallConfig,
    platform_name: str | None = None,
    has_privilege: Callable[[], bool] | None = None,
    mpi_present: Callable[[], bool] | None = None,
) -> bool:
    """Whether this run must be restarted with administrator rights.

    Only the Windows variant elevates, and only to install Microsoft
    MPI when it was requested and is absent.
    """
    if not config.mpi or not is_windows(platform_name):
        return False
    if mpi_present is None:
        mpi_present = lambda: probe_msmpi() is not None  # noqa: E731
    if mpi_present():
        return False
    if has_privilege is None:
        from ug4bootstrap.core.services.msmpi import has_required_privilege

        has_privilege = has_required_privilege
    return not has_privilege()


def run_install(
    config: InstallConfig,
    profile: BuildProfile | None = None,
    registry: AdapterRegistry | None = None,
    echo: Echo | None = None,
    platform_name: str | None = None,
    install_mpi: Callable[[], None] | None = None,
    which: Which = shutil.which,
    is_executable: Callable[[Path], bool] = is_executable_file,
) -> InstallResult:
    """Execute the full bootstrap pipeline.

    Args:
        config: Resolved run configuration.
        profile: Ecosystem data (default: built-in profile).
        registry: Adapter registry (default: real tools).
        echo: Sink for streamed command output.
        platform_name: ``platform.system()`` override (tests).
        install_mpi: Windows MPI installer callback. Defaults to the
            Microsoft MPI installer on Windows, nothing elsewhere.
        which: PATH lookup for tools and compilers (tests).
        is_executable: Fallback-directory compiler check (tests).

    Returns:
        InstallResult; ``error`` is set when a step failed.
    """
    profile = profile or BuildProfile()
    registry = registry or default_registry()
    logger.debug("Adapters: %s", registry.adapter_status())
    windows = is_windows(platform_name)
    if windows and install_mpi is None:
        from ug4bootstrap.core.services.msmpi import install_msmpi

        install_mpi = lambda: install_msmpi(registry)  # noqa: E731

    result = InstallResult(config=config)
    paths = WorkspacePaths.from_config(config)
    result.paths = paths

    try:
        # ── Fetch + workspace ───────────────────────────────────
        fetch_repository(config, paths, registry, echo=echo)
        build_workspace(paths, windows=windows)

        # ── Packages ────────────────────────────────────────────
        result.packages = install_packages(
            config, paths, profile, registry, echo=echo, which=which
        )

        # ── Vendoring ───────────────────────────────────────────
        if config.superlu:
            progress.info("Part 5/9: Vendoring upstream SuperLU sources")
            vendor_clone(
                superlu_bundle(profile),
                superlu_external_dir(paths, profile),
                registry,
                echo=echo,
            )
        if config.parmetis:
            progress.info("Part 6/9: Placing Parmetis plugin sources")
            vendor_archive(parmetis_bundle(config, profile), paths.plugins_dir)

        # ── Toolchain + configure ───────────────────────────────
        result.toolchain = resolve_toolchain(
            config.mpi,
            platform_name=platform_name,
            which=which,
            is_executable=is_executable,
            install_mpi=install_mpi if config.mpi else None,
        )
        result.configure = configure_build(
            config, paths, profile, result.toolchain, registry, echo=echo
        )

    except InstallError as e:
        logger.debug("Install aborted: %s", e, exc_info=True)
        result.error = str(e)
        return result
    except OSError as e:
        logger.debug("Install aborted on filesystem error", exc_info=True)
        result.error = f"Filesystem error: {e}"
        return result

    return result
