"""
UG4 Bootstrap: CLI entrypoint.

Usage:
    ug4-bootstrap [-mpi] [-promesh] [-neuro] [-lu] [-parmetis] [TARGET_DIR]
    python -m ug4bootstrap.main --help
"""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path

import click

from ug4bootstrap import __version__
from ug4bootstrap.core.data.constants import ENV_LOG_FILE, ENV_LOG_FILE_LEVEL, ENV_LOG_LEVEL
from ug4bootstrap.core.observability.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _log_level(debug: bool, verbose: bool, quiet: bool) -> str:
    """Flags win over ``UG4_LOG_LEVEL``; the most verbose flag wins."""
    for flag, name in ((debug, "DEBUG"), (verbose, "INFO"), (quiet, "ERROR")):
        if flag:
            return name
    return os.environ.get(ENV_LOG_LEVEL, "WARNING")


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="ug4-bootstrap")
@click.option("-mpi", "mpi", is_flag=True, help="Parallel build with MPI compilers (falls back if absent).")
@click.option("-promesh", "promesh", is_flag=True, help="Enable the ProMesh plugin.")
@click.option("-neuro", "neuro", is_flag=True, help="Add the NeuroBox source and install its packages.")
@click.option("-lu", "superlu", is_flag=True, help="Install SuperLU6 and vendor upstream SuperLU.")
@click.option("-parmetis", "parmetis", is_flag=True, help="Enable Parmetis from ./Parmetis.tar.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose diagnostics.")
@click.option("--quiet", "-q", is_flag=True, help="Only show warnings and errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="YAML build profile overriding packages and CMake options.",
)
@click.argument("target_dir", required=False)
def cli(
    mpi: bool,
    promesh: bool,
    neuro: bool,
    superlu: bool,
    parmetis: bool,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    target_dir: str | None,
) -> None:
    """UG4 Bootstrap: clone ughub, set up ug4 and configure the build.

    TARGET_DIR is where ughub is cloned (default: ughub). The ug4
    workspace is created next to it.

    \b
    Environment:
      USE_SSH=1              clone over SSH instead of HTTPS
      CLONE_DEPTH=N          shallow clone
      UGHUB_REPO_URL         clone from another URL
      UGHUB_BRANCH           clone a specific branch
      LAPACK_LIB_OVERRIDE    LAPACK library for the configure retry
      BLAS_LIB_OVERRIDE      BLAS library for the configure retry
    """
    setup_logging(
        level=_log_level(debug, verbose, quiet),
        log_file=os.environ.get(ENV_LOG_FILE),
        log_file_level=os.environ.get(ENV_LOG_FILE_LEVEL),
        quiet=quiet,
    )

    from ug4bootstrap.core.config.loader import ConfigError, load_install_config, load_profile

    flags = {
        "mpi": mpi,
        "promesh": promesh,
        "neuro": neuro,
        "superlu": superlu,
        "parmetis": parmetis,
    }
    try:
        config = load_install_config(flags, target_dir=target_dir)
        profile = load_profile(Path(config_path) if config_path else None)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    # ── Windows: elevate before anything touches the disk ───────
    from ug4bootstrap.core.errors import InstallError
    from ug4bootstrap.core.use_cases.install import needs_elevation, run_install

    if needs_elevation(config):
        from ug4bootstrap.core.services.msmpi import relaunch_elevated

        click.echo("Microsoft MPI must be installed; re-launching with administrator rights...")
        try:
            relaunch_elevated(sys.argv[1:])
        except InstallError as e:
            click.secho(f"❌ {e}", fg="red")
            sys.exit(1)
        return

    result = run_install(config, profile, echo=click.echo)
    logger.debug("Install result: %s", json.dumps(result.to_dict()))

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    click.secho(f"✅ {result.summary_line()}", fg="green", bold=True)


if __name__ == "__main__":
    cli()
