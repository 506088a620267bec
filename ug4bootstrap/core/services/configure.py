"""
Build configurator: assemble CMake options and configure ``ug4/build``.

State machine:

    Configuring ──ok──────────────────────────────▶ Succeeded
        │
        └─not ok─▶ RetryingWithLibPaths ──rc 0──▶ Succeeded
                                         └─rc≠0──▶ Failed

"Not ok" is anything ``classify`` does not call OK: a non-zero exit, or
a BLAS/LAPACK signature in the log even with a zero exit. The retry
adds explicit library paths and happens at most once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ug4bootstrap.adapters.build.cmake import CMakeAdapter
from ug4bootstrap.adapters.registry import AdapterRegistry
from ug4bootstrap.core.data.constants import FIRST_CONFIGURE_LOG, RETRY_CONFIGURE_LOG
from ug4bootstrap.core.domain.failure_signatures import (
    SIGNATURE_TABLE_VERSION,
    Outcome,
    classify,
    match_signature,
)
from ug4bootstrap.core.errors import ConfigureFailedError, InstallError, PreconditionError
from ug4bootstrap.core.models.action import Action, Receipt
from ug4bootstrap.core.models.install import (
    BuildOptionSet,
    InstallConfig,
    ToolchainSelection,
    WorkspacePaths,
)
from ug4bootstrap.core.models.profile import BuildProfile
from ug4bootstrap.core.observability.logging_config import get_progress_logger
from ug4bootstrap.core.services.commands import Echo, run_action
from ug4bootstrap.core.services.workspace import ensure_directory

logger = logging.getLogger(__name__)
progress = get_progress_logger()


@dataclass
class ConfigureResult:
    """Outcome of the configuration step."""

    options: BuildOptionSet
    attempts: int = 1
    first_outcome: Outcome = Outcome.OK
    log_paths: list[Path] = field(default_factory=list)

    @property
    def retried(self) -> bool:
        return self.attempts > 1


def build_options(
    config: InstallConfig,
    profile: BuildProfile,
    toolchain: ToolchainSelection,
) -> BuildOptionSet:
    """Assemble the option set, baseline first, compilers last.

    Raises:
        InstallError: The profile sets an option twice with different values.
    """
    try:
        return _assemble(config, profile, toolchain)
    except ValueError as e:
        raise InstallError(f"Conflicting build options: {e}") from e


def _assemble(
    config: InstallConfig,
    profile: BuildProfile,
    toolchain: ToolchainSelection,
) -> BuildOptionSet:
    options = BuildOptionSet()
    options.add("PARALLEL", "ON" if toolchain.parallel else "OFF")
    options.extend(profile.baseline_options)

    groups = profile.feature_options
    if config.promesh:
        progress.info("ProMesh enabled (-promesh): adding ProMesh CMake flags.")
        options.extend(groups.promesh)
    if config.neuro:
        progress.info("Neuro options enabled (-neuro): adding Neuro-related CMake flags.")
        options.extend(groups.neuro)
    if config.superlu:
        progress.info("SuperLU option enabled (-lu): adding SuperLU CMake flag.")
        options.extend(groups.superlu)
    if config.parmetis:
        progress.info("Parmetis enabled (-parmetis): adding Parmetis CMake flags.")
        options.extend(groups.parmetis)
    if toolchain.parallel:
        options.extend(groups.parallel)

    options.add("CMAKE_C_COMPILER", toolchain.c_compiler)
    options.add("CMAKE_CXX_COMPILER", toolchain.cxx_compiler)
    return options


def library_retry_options(config: InstallConfig, profile: BuildProfile) -> dict[str, str]:
    """Explicit BLAS/LAPACK paths: overrides first, profile defaults otherwise."""
    return {
        "USER_LAPACK_LIBRARIES": config.lapack_lib or profile.default_lapack_lib,
        "USER_BLAS_LIBRARIES": config.blas_lib or profile.default_blas_lib,
    }


def configure_build(
    config: InstallConfig,
    paths: WorkspacePaths,
    profile: BuildProfile,
    toolchain: ToolchainSelection,
    registry: AdapterRegistry,
    echo: Echo | None = None,
) -> ConfigureResult:
    """Run CMake configuration with one library-path retry.

    Raises:
        PreconditionError: cmake is not installed.
        ConfigureFailedError: The retry failed as well.
    """
    progress.info("Part 8/9: Preparing CMake arguments")
    options = build_options(config, profile, toolchain)

    build_dir = paths.build_dir
    progress.info("Part 9/9: Configuring CMake in: %s", build_dir)
    if not registry.is_available("cmake"):
        raise PreconditionError("cmake is not installed.")
    ensure_directory(build_dir)

    first_log = build_dir / FIRST_CONFIGURE_LOG
    receipt = _run_cmake(registry, "configure-first", options, build_dir, first_log, echo)
    outcome = classify(_log_text(first_log, receipt), _exit_status(receipt))
    result = ConfigureResult(options=options, first_outcome=outcome, log_paths=[first_log])

    if outcome is Outcome.OK:
        progress.info("CMake configuration succeeded on first attempt.")
        return result

    signature = match_signature(_log_text(first_log, receipt))
    logger.info(
        "First configure attempt classified %s (signature=%r, table v%d)",
        outcome.value, signature, SIGNATURE_TABLE_VERSION,
    )

    retry_libs = library_retry_options(config, profile)
    progress.info("CMake reported missing BLAS/LAPACK or failed. Retrying with explicit libraries:")
    progress.info("  LAPACK: %s", retry_libs["USER_LAPACK_LIBRARIES"])
    progress.info("  BLAS:   %s", retry_libs["USER_BLAS_LIBRARIES"])

    retry_log = build_dir / RETRY_CONFIGURE_LOG
    retry_options = options.with_entries(retry_libs)
    retry = _run_cmake(registry, "configure-retry", retry_options, build_dir, retry_log, echo)
    result.attempts = 2
    result.options = retry_options
    result.log_paths.append(retry_log)

    if retry.failed:
        if toolchain.parallel:
            progress.warning(
                "NOTE: If MPI is enabled and BLAS/LAPACK detection fails, "
                "ensure mpi variants of BLAS/LAPACK are installed."
            )
        raise ConfigureFailedError(first_log, retry_log)

    progress.info("CMake configuration succeeded with explicit BLAS/LAPACK.")
    return result


def _run_cmake(
    registry: AdapterRegistry,
    action_id: str,
    options: BuildOptionSet,
    build_dir: Path,
    log_path: Path,
    echo: Echo | None,
) -> Receipt:
    params = {"options": options.to_args(), "source": ".."}
    return run_action(
        registry,
        Action(
            id=action_id,
            adapter="cmake",
            argv=CMakeAdapter.build_argv(params),
            cwd=str(build_dir),
            log_path=str(log_path),
            stream=True,
            params=params,
        ),
        echo=echo,
    )


def _log_text(log_path: Path, receipt: Receipt) -> str:
    """The teed log if it was written, else the captured output."""
    try:
        return log_path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return receipt.output


def _exit_status(receipt: Receipt) -> int:
    if receipt.return_code is not None:
        return receipt.return_code
    return 0 if receipt.ok else 1
