"""
Workspace builder: the sibling ``ug4`` directory and the ``ughub`` alias.

ughub is driven from inside the workspace through the fixed relative
path ``../ughub/ughub``. When the clone was given another name, a
``ughub`` symlink next to it keeps that path valid.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ug4bootstrap.core.data.constants import (
    ENTRY_POINT_NAME,
    EXPECTED_CLONE_NAME,
    RELATIVE_ENTRY_POINT,
)
from ug4bootstrap.core.errors import InstallError, PreconditionError
from ug4bootstrap.core.models.install import WorkspacePaths
from ug4bootstrap.core.observability.logging_config import get_progress_logger

logger = logging.getLogger(__name__)
progress = get_progress_logger()


def build_workspace(paths: WorkspacePaths, windows: bool = False) -> WorkspacePaths:
    """Create the workspace (idempotent) and the alias symlink if needed.

    Raises:
        PreconditionError: The workspace path or the alias name is taken
            by something of the wrong type.
    """
    workspace = paths.workspace_dir
    progress.info("Part 2/9: Creating sibling '%s' directory", workspace.name)
    progress.info("  Parent directory (of ughub): %s", paths.parent_dir)
    progress.info("  ug4 directory to create:     %s", workspace)

    ensure_directory(workspace)
    if windows:
        ensure_directory(paths.apps_dir)
    progress.info("Created (or already existed):  %s", workspace)

    if paths.needs_alias:
        ensure_alias(paths)

    return paths


def ensure_directory(path: Path) -> Path:
    """``mkdir -p`` that reports a wrong-type entry instead of crashing.

    Raises:
        PreconditionError: ``path`` exists and is not a directory.
        InstallError: The directory could not be created.
    """
    if os.path.lexists(path) and not path.is_dir():
        raise PreconditionError(f"'{path}' exists but is not a directory.")
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise InstallError(f"Cannot create directory {path}: {e}") from e
    return path


def ensure_alias(paths: WorkspacePaths) -> None:
    """Point ``<parent>/ughub`` at the clone unless the name is already taken."""
    alias = paths.alias_dir
    if alias.is_symlink() or alias.is_dir():
        logger.debug("Alias %s already present, leaving it alone", alias)
        return
    if os.path.lexists(alias):
        raise PreconditionError(
            f"'{alias}' exists and is not a directory/symlink."
        )
    # Relative target: the pair stays valid if the parent directory moves.
    try:
        alias.symlink_to(paths.clone_dir.name, target_is_directory=True)
    except OSError as e:
        raise InstallError(f"Cannot create symlink {alias}: {e}") from e
    progress.info("Created symlink: %s -> %s", alias, paths.clone_dir.name)


def entry_point_from_workspace(paths: WorkspacePaths) -> Path:
    """The package-manager entry point as reached from inside the workspace."""
    return paths.workspace_dir / RELATIVE_ENTRY_POINT


def verify_layout(paths: WorkspacePaths) -> Path:
    """Check that ``../ughub/ughub`` from the workspace reaches the clone.

    Returns:
        The resolved entry point path.

    Raises:
        PreconditionError: The entry point is missing or the relative
            path resolves somewhere else.
    """
    via_workspace = entry_point_from_workspace(paths)
    expected = paths.parent_dir / EXPECTED_CLONE_NAME / ENTRY_POINT_NAME
    if not via_workspace.exists():
        raise PreconditionError(
            f"Package manager entry point not found: {via_workspace} "
            f"(expected the clone at {paths.clone_dir})"
        )
    resolved = via_workspace.resolve()
    if resolved != expected.resolve():
        raise PreconditionError(
            f"'{RELATIVE_ENTRY_POINT}' from {paths.workspace_dir} resolves to "
            f"{resolved}, expected {expected.resolve()}"
        )
    return resolved
