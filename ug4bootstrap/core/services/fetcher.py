"""
Repository fetcher: clone the ughub package-manager repository.

The destination must not exist in any form (file, directory, or even a
dangling symlink); the check runs before any network access so a
mistyped path never overwrites anything. Clone failures are not
retried here.
"""

from __future__ import annotations

import logging
import os

from ug4bootstrap.adapters.registry import AdapterRegistry
from ug4bootstrap.adapters.vcs.git import GitAdapter
from ug4bootstrap.core.errors import PreconditionError
from ug4bootstrap.core.models.action import Action
from ug4bootstrap.core.models.install import InstallConfig, WorkspacePaths
from ug4bootstrap.core.observability.logging_config import get_progress_logger
from ug4bootstrap.core.services.commands import Echo, run_checked

logger = logging.getLogger(__name__)
progress = get_progress_logger()


def fetch_repository(
    config: InstallConfig,
    paths: WorkspacePaths,
    registry: AdapterRegistry,
    echo: Echo | None = None,
) -> str:
    """Clone ughub into ``paths.clone_dir``.

    Returns:
        The ``git remote -v`` output of the fresh clone.

    Raises:
        PreconditionError: git missing, or the destination is occupied.
        CommandFailedError: The clone (or remote listing) failed.
    """
    progress.info("Part 1/9: Cloning 'ughub' repository")
    progress.info("  Working directory:          %s", config.launch_dir)
    progress.info("  Repository URL:             %s", config.clone_url)
    progress.info("  Target clone directory:     %s", paths.clone_dir)
    if config.branch:
        progress.info("  Branch:                     %s", config.branch)
    if config.clone_depth:
        progress.info("  Shallow clone depth:        %s", config.clone_depth)

    if not registry.is_available("git"):
        raise PreconditionError("git is not installed.")
    if os.path.lexists(paths.clone_dir):
        raise PreconditionError(f"'{paths.clone_dir}' already exists.")

    clone_params = {
        "operation": "clone",
        "url": config.clone_url,
        "dest": str(paths.clone_dir),
        "depth": config.clone_depth,
        "branch": config.branch,
    }
    run_checked(
        registry,
        Action(
            id="clone",
            adapter="git",
            argv=GitAdapter.build_argv(clone_params),
            cwd=str(config.launch_dir),
            stream=True,
            params=clone_params,
        ),
        echo=echo,
    )
    progress.info("Clone complete.")

    remote_params = {"operation": "remote", "repo": str(paths.clone_dir)}
    receipt = run_checked(
        registry,
        Action(
            id="remote",
            adapter="git",
            argv=GitAdapter.build_argv(remote_params),
            params=remote_params,
        ),
    )
    for line in receipt.output.splitlines():
        progress.info("  %s", line)
    return receipt.output
