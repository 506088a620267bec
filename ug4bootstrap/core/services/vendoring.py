"""
Vendoring: place third-party source trees under plugin directories.

Two variants:

- clone: ``git clone`` the upstream project into a fixed directory
  (SuperLU into ``plugins/SuperLU6/external/superlu``).
- archive: unpack a tarball shipped next to the installer (ParMETIS,
  ``Parmetis.tar`` in the launch directory) into
  ``plugins/Parmetis``, whatever its internal layout.

Both are last-run-wins: an existing destination is deleted first,
never merged.
"""

from __future__ import annotations

import logging
import os
import shutil
import tarfile
from pathlib import Path

from ug4bootstrap.adapters.registry import AdapterRegistry
from ug4bootstrap.adapters.vcs.git import GitAdapter
from ug4bootstrap.core.errors import InstallError, PreconditionError
from ug4bootstrap.core.models.action import Action
from ug4bootstrap.core.models.install import ExternalSourceBundle, InstallConfig, WorkspacePaths
from ug4bootstrap.core.models.profile import BuildProfile
from ug4bootstrap.core.observability.logging_config import get_progress_logger
from ug4bootstrap.core.services.commands import Echo, run_checked
from ug4bootstrap.core.services.workspace import ensure_directory

logger = logging.getLogger(__name__)
progress = get_progress_logger()


class ExtractionError(InstallError):
    """The archive could not be unpacked."""


# ── Bundles ─────────────────────────────────────────────────────


def superlu_bundle(profile: BuildProfile) -> ExternalSourceBundle:
    return ExternalSourceBundle(
        name="SuperLU",
        canonical_name=profile.superlu_dir_name,
        kind="clone",
        source=profile.superlu_url,
    )


def parmetis_bundle(config: InstallConfig, profile: BuildProfile) -> ExternalSourceBundle:
    return ExternalSourceBundle(
        name="ParMETIS",
        canonical_name=profile.parmetis_dir_name,
        kind="archive",
        source=str(Path(config.launch_dir) / profile.parmetis_archive),
        alternate_names=tuple(profile.parmetis_alternate_names),
    )


def superlu_external_dir(paths: WorkspacePaths, profile: BuildProfile) -> Path:
    return paths.plugins_dir / profile.superlu_package / "external"


# ── Clone variant ───────────────────────────────────────────────


def vendor_clone(
    bundle: ExternalSourceBundle,
    target_parent: Path,
    registry: AdapterRegistry,
    echo: Echo | None = None,
) -> Path:
    """Clone ``bundle.source`` into ``target_parent/<canonical name>``.

    Any existing entry of that name is removed first.

    Raises:
        CommandFailedError: The clone failed.
    """
    progress.info("  Preparing external directory: %s", target_parent)
    ensure_directory(target_parent)

    dest = target_parent / bundle.canonical_name
    if os.path.lexists(dest):
        progress.info("  Removing existing '%s' at: %s", bundle.canonical_name, dest)
        _remove(dest)

    progress.info("  Cloning upstream %s into '%s'...", bundle.name, bundle.canonical_name)
    params = {"operation": "clone", "url": bundle.source, "dest": str(dest)}
    run_checked(
        registry,
        Action(
            id=f"vendor-{bundle.canonical_name}",
            adapter="git",
            argv=GitAdapter.build_argv(params),
            cwd=str(target_parent),
            stream=True,
            params=params,
        ),
        echo=echo,
    )
    progress.info("  %s ready at: %s", bundle.name, dest)
    return dest


# ── Archive variant ─────────────────────────────────────────────


def vendor_archive(bundle: ExternalSourceBundle, plugins_dir: Path) -> Path:
    """Unpack ``bundle.source`` into ``plugins_dir/<canonical name>``.

    One top-level directory in the archive is renamed to the canonical
    name; anything else (files, several entries, nothing) is moved
    into a freshly created canonical directory. Extraction happens in a
    private scratch directory that is removed whatever happens.

    Raises:
        PreconditionError: The archive does not exist.
        ExtractionError: The archive could not be read.
        InstallError: The canonical directory is missing afterwards.
    """
    archive = Path(bundle.source)
    progress.info("%s requested. Expecting tar: %s", bundle.name, archive)
    if not archive.is_file():
        raise PreconditionError(f"{archive.name} not found at {archive}")

    dest = plugins_dir / bundle.canonical_name
    ensure_directory(plugins_dir)

    for name in (bundle.canonical_name, *bundle.alternate_names):
        stale = plugins_dir / name
        if os.path.lexists(stale):
            progress.info("  Removing existing %s", stale)
            _remove(stale)

    scratch = plugins_dir / f".{bundle.canonical_name.lower()}_extract_{os.getpid()}"
    if os.path.lexists(scratch):
        _remove(scratch)
    ensure_directory(scratch)

    try:
        progress.info("  Extracting %s into %s", archive.name, scratch)
        _extract(archive, scratch)
        try:
            _place_extracted(scratch, dest)
        except OSError as e:
            raise InstallError(f"Cannot move {bundle.name} sources to {dest}: {e}") from e
    finally:
        shutil.rmtree(scratch, ignore_errors=True)

    if not dest.is_dir():
        raise InstallError(f"Failed to place {bundle.name} under {plugins_dir}")
    progress.info("  %s plugin ready at: %s", bundle.canonical_name, dest)
    return dest


def _extract(archive: Path, into: Path) -> None:
    try:
        with tarfile.open(archive) as tf:
            tf.extractall(into, filter="data")
    except (tarfile.TarError, OSError) as e:
        raise ExtractionError(f"Cannot extract {archive}: {e}") from e


def _place_extracted(scratch: Path, dest: Path) -> None:
    """Rename a lone top-level directory, otherwise consolidate everything."""
    extracted = sorted(scratch.iterdir())
    if len(extracted) == 1 and extracted[0].is_dir() and not extracted[0].is_symlink():
        progress.info("  Using extracted directory: %s → %s", extracted[0].name, dest.name)
        extracted[0].rename(dest)
        return

    progress.info("  Multiple/mixed contents; consolidating into %s", dest)
    dest.mkdir(parents=True, exist_ok=True)
    for entry in extracted:
        shutil.move(str(entry), str(dest / entry.name))


def _remove(path: Path) -> None:
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as e:
        raise InstallError(f"Cannot remove {path}: {e}") from e
