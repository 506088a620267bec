"""
Configuration loader: argv flags, environment overrides, build profile.

Two entry points:

- ``load_install_config`` folds parsed CLI flags and the environment
  into a frozen ``InstallConfig``. Pure: no filesystem or network access.
- ``load_profile`` reads an optional YAML build profile and merges it
  over the built-in defaults.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ug4bootstrap.core.data.constants import (
    DEFAULT_TARGET_DIR,
    ENV_BLAS_LIB,
    ENV_BRANCH,
    ENV_CLONE_DEPTH,
    ENV_LAPACK_LIB,
    ENV_REPO_URL,
    ENV_USE_SSH,
)
from ug4bootstrap.core.models.install import InstallConfig
from ug4bootstrap.core.models.profile import BuildProfile

logger = logging.getLogger(__name__)

FEATURE_FLAGS = ("mpi", "promesh", "neuro", "superlu", "parmetis")


class ConfigError(Exception):
    """Raised when the install configuration or build profile is invalid."""


def load_install_config(
    flags: Mapping[str, bool] | None = None,
    target_dir: str | None = None,
    environ: Mapping[str, str] | None = None,
    launch_dir: Path | None = None,
) -> InstallConfig:
    """Build the run configuration.

    Args:
        flags: Feature flags by name (see ``FEATURE_FLAGS``). Missing = off.
        target_dir: Clone destination (default: ``ughub``).
        environ: Environment to read overrides from (default: ``os.environ``).
        launch_dir: Directory the run was started from (default: cwd).

    Raises:
        ConfigError: On unknown flags or malformed overrides.
    """
    flags = dict(flags or {})
    env = os.environ if environ is None else environ

    unknown = sorted(set(flags) - set(FEATURE_FLAGS))
    if unknown:
        raise ConfigError(f"Unknown feature flag(s): {', '.join(unknown)}")

    depth_raw = _env(env, ENV_CLONE_DEPTH)
    clone_depth: int | None = None
    if depth_raw is not None:
        try:
            clone_depth = int(depth_raw)
        except ValueError as e:
            raise ConfigError(
                f"{ENV_CLONE_DEPTH} must be a positive integer, got {depth_raw!r}"
            ) from e
        if clone_depth <= 0:
            raise ConfigError(
                f"{ENV_CLONE_DEPTH} must be a positive integer, got {depth_raw!r}"
            )

    try:
        config = InstallConfig(
            **{name: bool(flags.get(name, False)) for name in FEATURE_FLAGS},
            target_dir=target_dir or DEFAULT_TARGET_DIR,
            launch_dir=(launch_dir or Path.cwd()).resolve(),
            use_ssh=_env(env, ENV_USE_SSH) == "1",
            clone_depth=clone_depth,
            repo_url=_env(env, ENV_REPO_URL),
            branch=_env(env, ENV_BRANCH),
            lapack_lib=_env(env, ENV_LAPACK_LIB),
            blas_lib=_env(env, ENV_BLAS_LIB),
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid install configuration: {e}") from e

    logger.debug("Resolved install config: %s", config.model_dump(mode="json"))
    return config


def _env(env: Mapping[str, str], name: str) -> str | None:
    """Read an override; empty strings count as unset."""
    value = env.get(name, "")
    return value if value else None


def load_profile(path: Path | None = None) -> BuildProfile:
    """Load the build profile, optionally overridden by a YAML file.

    Top-level keys in the file replace the defaults; ``feature_options``
    is merged one feature group at a time.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid.
    """
    if path is None:
        return BuildProfile()

    if not path.is_file():
        raise ConfigError(f"Profile file not found: {path}")

    logger.debug("Loading build profile from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The file may wrap everything under a "profile" key or be flat
    if "profile" in data and isinstance(data["profile"], dict):
        data = data["profile"]

    merged: dict[str, Any] = BuildProfile().model_dump()
    for key, value in data.items():
        if key == "feature_options" and isinstance(value, dict):
            merged["feature_options"].update(value)
        else:
            merged[key] = value

    try:
        profile = BuildProfile.model_validate(merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid build profile: {e}") from e

    logger.info("Loaded build profile from %s", path)
    return profile
