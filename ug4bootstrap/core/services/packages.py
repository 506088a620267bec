"""
Package installer: drive ughub from inside the workspace.

The entry point is invoked through the fixed relative path
``../ughub/ughub`` with the workspace as cwd: directly when it is
executable, otherwise through a Python interpreter found on PATH.
Sub-commands run strictly in order and the first failure halts.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable

from ug4bootstrap.adapters.registry import AdapterRegistry
from ug4bootstrap.core.data.constants import FALLBACK_INTERPRETERS, RELATIVE_ENTRY_POINT
from ug4bootstrap.core.errors import PreconditionError
from ug4bootstrap.core.models.action import Action
from ug4bootstrap.core.models.install import InstallConfig, WorkspacePaths
from ug4bootstrap.core.models.profile import BuildProfile
from ug4bootstrap.core.observability.logging_config import get_progress_logger
from ug4bootstrap.core.services.commands import Echo, run_checked
from ug4bootstrap.core.services.workspace import verify_layout

logger = logging.getLogger(__name__)
progress = get_progress_logger()


def resolve_invocation(
    paths: WorkspacePaths,
    which: Callable[[str], str | None] = shutil.which,
) -> list[str]:
    """Command prefix that runs the package manager from the workspace.

    Raises:
        PreconditionError: The entry point is missing, or it is neither
            executable nor runnable through an interpreter on PATH.
    """
    entry = verify_layout(paths)
    if entry.is_file() and os.access(entry, os.X_OK):
        return [RELATIVE_ENTRY_POINT]

    for interpreter in FALLBACK_INTERPRETERS:
        if which(interpreter):
            logger.debug("%s is not executable, using %s", entry, interpreter)
            return [interpreter, RELATIVE_ENTRY_POINT]

    raise PreconditionError(
        f"'{RELATIVE_ENTRY_POINT}' is not executable and no Python interpreter "
        f"({' or '.join(FALLBACK_INTERPRETERS)}) was found."
    )


def plan_subcommands(config: InstallConfig, profile: BuildProfile) -> list[tuple[str, list[str]]]:
    """Ordered (action id, sub-command args) pairs for this configuration."""
    plan: list[tuple[str, list[str]]] = [
        ("ughub-init", ["init"]),
        ("ughub-install-baseline", ["install", *profile.baseline_packages]),
    ]
    if config.neuro:
        source = profile.neuro_source
        plan.append(("ughub-addsource-neuro", ["addsource", source.name, source.url]))
        plan.append(("ughub-install-neuro", ["install", *profile.neuro_packages]))
    if config.superlu:
        plan.append(("ughub-install-superlu", ["install", profile.superlu_package]))
    return plan


def install_packages(
    config: InstallConfig,
    paths: WorkspacePaths,
    profile: BuildProfile,
    registry: AdapterRegistry,
    echo: Echo | None = None,
    which: Callable[[str], str | None] = shutil.which,
) -> list[str]:
    """Run ughub init, the baseline install and the feature-gated sub-commands.

    Returns:
        The action IDs that ran, in order.

    Raises:
        PreconditionError: The entry point cannot be invoked.
        CommandFailedError: A sub-command failed.
    """
    progress.info("Part 3/9: Initializing %s using relative path", paths.workspace_dir.name)
    progress.info("  Changing directory to:       %s", paths.workspace_dir)
    prefix = resolve_invocation(paths, which=which)

    done: list[str] = []
    for action_id, args in plan_subcommands(config, profile):
        if action_id == "ughub-addsource-neuro":
            progress.info("Neuro mode enabled (-neuro): adding NeuroBox source and installing packages.")
        elif action_id == "ughub-install-superlu":
            progress.info("SuperLU mode enabled (-lu): installing %s.", profile.superlu_package)
        run_checked(
            registry,
            Action(
                id=action_id,
                adapter="shell",
                argv=[*prefix, *args],
                cwd=str(paths.workspace_dir),
                stream=True,
            ),
            echo=echo,
        )
        done.append(action_id)
    return done
