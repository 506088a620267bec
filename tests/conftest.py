"""
Shared test fixtures and configuration.
"""

import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from ug4bootstrap.adapters.base import ExecutionContext
from ug4bootstrap.adapters.mock import MockAdapter
from ug4bootstrap.adapters.registry import AdapterRegistry
from ug4bootstrap.core.models.install import InstallConfig
from ug4bootstrap.core.observability.logging_config import PROGRESS_LOGGER


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo whatever setup_logging did in a CLI test."""
    yield
    progress = logging.getLogger(PROGRESS_LOGGER)
    progress.handlers.clear()
    progress.propagate = True
    progress.setLevel(logging.NOTSET)
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()


# ── Fake tools ──────────────────────────────────────────────────


def fake_clone(context: ExecutionContext) -> None:
    """What a real ``git clone`` of ughub leaves behind."""
    dest = Path(context.action.params["dest"])
    dest.mkdir(parents=True)
    entry = dest / "ughub"
    entry.write_text("#!/bin/sh\nexit 0\n")
    entry.chmod(0o755)
    return None


def fake_vendor_clone(context: ExecutionContext) -> None:
    dest = Path(context.action.params["dest"])
    dest.mkdir(parents=True)
    (dest / "CMakeLists.txt").write_text("project(superlu)\n")
    return None


def fake_ughub_init(context: ExecutionContext) -> None:
    """``ughub init`` lays out the plugin and app directories."""
    workspace = Path(context.action.cwd)
    (workspace / "plugins").mkdir(exist_ok=True)
    (workspace / "apps").mkdir(exist_ok=True)
    return None


def make_which(tools: dict[str, str]) -> Callable[[str], str | None]:
    """A ``shutil.which`` stand-in that knows only ``tools``."""
    return lambda name: tools.get(name)


# ── Fixtures ────────────────────────────────────────────────────


@pytest.fixture
def mocks() -> dict[str, MockAdapter]:
    """One mock per external tool, with realistic side effects."""
    git = MockAdapter(adapter_name="git")
    git.set_hook("clone", fake_clone)
    git.set_hook("vendor-superlu", fake_vendor_clone)
    shell = MockAdapter(adapter_name="shell")
    shell.set_hook("ughub-init", fake_ughub_init)
    cmake = MockAdapter(adapter_name="cmake", default_output="-- Configuring done\n")
    return {"git": git, "shell": shell, "cmake": cmake}


@pytest.fixture
def registry(mocks: dict[str, MockAdapter]) -> AdapterRegistry:
    reg = AdapterRegistry()
    for adapter in mocks.values():
        reg.register(adapter)
    return reg


@pytest.fixture
def launch_dir(tmp_path: Path) -> Path:
    """Directory the installer is started from."""
    d = tmp_path / "work"
    d.mkdir()
    return d.resolve()


@pytest.fixture
def make_config(launch_dir: Path) -> Callable[..., InstallConfig]:
    def _make(**kwargs) -> InstallConfig:
        kwargs.setdefault("launch_dir", launch_dir)
        return InstallConfig(**kwargs)

    return _make


@pytest.fixture
def which_of() -> Callable[[dict[str, str]], Callable[[str], str | None]]:
    """Factory for PATH lookups that know only the given tools."""
    return make_which


@pytest.fixture
def gcc_only() -> Callable[[str], str | None]:
    return make_which({"gcc": "/usr/bin/gcc", "g++": "/usr/bin/g++"})