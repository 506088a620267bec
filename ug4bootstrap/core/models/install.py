"""
Install models: configuration, derived paths, toolchain, build options.

``InstallConfig`` is resolved once from argv + environment and never
mutated. Everything else is derived from it and threaded explicitly
through the pipeline steps; nothing relies on the process cwd.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ug4bootstrap.core.data.constants import (
    APPS_DIR_NAME,
    BUILD_DIR_NAME,
    DEFAULT_TARGET_DIR,
    EXPECTED_CLONE_NAME,
    PLUGINS_DIR_NAME,
    UGHUB_HTTPS_URL,
    UGHUB_SSH_URL,
    WORKSPACE_NAME,
)


class InstallConfig(BaseModel):
    """Resolved feature flags and overrides for one run."""

    model_config = ConfigDict(frozen=True)

    mpi: bool = False
    promesh: bool = False
    neuro: bool = False
    superlu: bool = False
    parmetis: bool = False

    target_dir: str = DEFAULT_TARGET_DIR
    launch_dir: Path = Field(default_factory=Path.cwd)

    use_ssh: bool = False
    clone_depth: int | None = Field(default=None, gt=0)
    repo_url: str | None = None
    branch: str | None = None

    lapack_lib: str | None = None
    blas_lib: str | None = None

    @property
    def clone_url(self) -> str:
        """Upstream URL: explicit override, else the transport default."""
        if self.repo_url:
            return self.repo_url
        return UGHUB_SSH_URL if self.use_ssh else UGHUB_HTTPS_URL

    def feature_summary(self, parallel: bool) -> dict[str, str]:
        """ON/OFF states for the closing summary line."""

        def onoff(flag: bool) -> str:
            return "ON" if flag else "OFF"

        return {
            "PARALLEL": onoff(parallel),
            "ProMesh": onoff(self.promesh),
            "Neuro": onoff(self.neuro),
            "SuperLU": onoff(self.superlu),
            "Parmetis": onoff(self.parmetis),
        }


@dataclass(frozen=True)
class WorkspacePaths:
    """Absolute paths derived from the configuration."""

    clone_dir: Path
    workspace_dir: Path

    @classmethod
    def from_config(cls, config: InstallConfig) -> WorkspacePaths:
        target = Path(config.target_dir).expanduser()
        if not target.is_absolute():
            target = Path(config.launch_dir) / target
        # Physical parent, literal leaf: the leaf may be a symlink we must not follow.
        parent = target.parent.resolve()
        clone_dir = parent / target.name
        return cls(clone_dir=clone_dir, workspace_dir=parent / WORKSPACE_NAME)

    @property
    def parent_dir(self) -> Path:
        return self.clone_dir.parent

    @property
    def alias_dir(self) -> Path:
        """Where the workspace expects to find the package manager."""
        return self.parent_dir / EXPECTED_CLONE_NAME

    @property
    def needs_alias(self) -> bool:
        return self.clone_dir.name != EXPECTED_CLONE_NAME

    @property
    def plugins_dir(self) -> Path:
        return self.workspace_dir / PLUGINS_DIR_NAME

    @property
    def apps_dir(self) -> Path:
        return self.workspace_dir / APPS_DIR_NAME

    @property
    def build_dir(self) -> Path:
        return self.workspace_dir / BUILD_DIR_NAME


@dataclass(frozen=True)
class ToolchainSelection:
    """Resolved compiler pair."""

    c_compiler: str
    cxx_compiler: str
    parallel: bool = False
    degraded: bool = False  # MPI requested but unavailable


@dataclass(frozen=True)
class ExternalSourceBundle:
    """A third-party source tree to place under a plugin directory."""

    name: str
    canonical_name: str
    kind: Literal["clone", "archive"]
    source: str
    alternate_names: tuple[str, ...] = ()


class BuildOptionSet:
    """Ordered, append-only set of ``KEY=VALUE`` build options.

    Options can be added but never removed or silently changed within
    a run. Adding an identical entry twice is a no-op; adding a known
    key with a different value is an error.
    """

    def __init__(self, entries: list[tuple[str, str]] | None = None):
        self._entries: dict[str, str] = {}
        for key, value in entries or []:
            self.add(key, value)

    def add(self, key: str, value: str) -> None:
        existing = self._entries.get(key)
        if existing is not None and existing != value:
            raise ValueError(
                f"Build option {key} already set to {existing!r}, refusing {value!r}"
            )
        self._entries[key] = value

    def extend(self, entries: dict[str, str] | list[tuple[str, str]]) -> None:
        items = entries.items() if isinstance(entries, dict) else entries
        for key, value in items:
            self.add(key, value)

    def with_entries(self, entries: dict[str, str]) -> BuildOptionSet:
        """Return a copy with extra entries appended."""
        copy = BuildOptionSet(list(self._entries.items()))
        copy.extend(entries)
        return copy

    def get(self, key: str) -> str | None:
        return self._entries.get(key)

    def items(self) -> list[tuple[str, str]]:
        return list(self._entries.items())

    def to_args(self) -> list[str]:
        """Render as ``-DKEY=VALUE`` tokens in insertion order."""
        return [f"-D{key}={value}" for key, value in self._entries.items()]

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"<BuildOptionSet {self.to_args()!r}>"
