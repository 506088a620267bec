"""
Tests for the CLI: flags, usage errors, exit codes.
"""

from pathlib import Path

import pytest
from click.testing import CliRunner

from ug4bootstrap.core.models.install import InstallConfig
from ug4bootstrap.core.use_cases import install as install_use_case
from ug4bootstrap.core.use_cases.install import InstallResult
from ug4bootstrap.main import cli


@pytest.fixture
def captured(monkeypatch, tmp_path: Path):
    """Replace the pipeline; record what the CLI handed to it."""
    calls: dict = {}
    outcome: dict = {"error": None}

    def fake_run_install(config: InstallConfig, profile=None, **kwargs) -> InstallResult:
        calls["config"] = config
        calls["profile"] = profile
        calls["kwargs"] = kwargs
        return InstallResult(config=config, error=outcome["error"])

    monkeypatch.setattr(install_use_case, "run_install", fake_run_install)
    monkeypatch.chdir(tmp_path)
    calls["outcome"] = outcome
    return calls


class TestCLIGlobal:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "UG4 Bootstrap" in result.output
        assert "-mpi" in result.output
        assert "-parmetis" in result.output

    def test_short_help(self):
        result = CliRunner().invoke(cli, ["-h"])
        assert result.exit_code == 0
        assert "TARGET_DIR" in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    @pytest.mark.parametrize("flag", ["-x", "-bogus", "--mpi", "-MPI"])
    def test_unknown_flag(self, captured, flag):
        result = CliRunner().invoke(cli, [flag])
        assert result.exit_code == 2
        assert "config" not in captured

    def test_two_positionals_rejected(self, captured):
        result = CliRunner().invoke(cli, ["a", "b"])
        assert result.exit_code == 2
        assert "config" not in captured


class TestInstallCommand:
    def test_flags_mapped(self, captured):
        result = CliRunner().invoke(cli, ["-mpi", "-lu", "-neuro", "myhub"])
        assert result.exit_code == 0, result.output
        config = captured["config"]
        assert config.mpi and config.superlu and config.neuro
        assert not config.promesh and not config.parmetis
        assert config.target_dir == "myhub"

    def test_default_target(self, captured, tmp_path: Path):
        result = CliRunner().invoke(cli, [])
        assert result.exit_code == 0, result.output
        assert captured["config"].target_dir == "ughub"
        assert captured["config"].launch_dir == tmp_path.resolve()

    def test_summary_on_success(self, captured):
        result = CliRunner().invoke(cli, ["-promesh"])
        assert result.exit_code == 0
        assert "All done. ug4 initialized and CMake configured" in result.output
        assert "ProMesh=ON" in result.output

    def test_failure_exit_code(self, captured):
        captured["outcome"]["error"] = "'/w/ughub' already exists."
        result = CliRunner().invoke(cli, [])
        assert result.exit_code == 1
        assert "❌ '/w/ughub' already exists." in result.output

    def test_environment_overrides(self, captured):
        result = CliRunner().invoke(cli, [], env={"CLONE_DEPTH": "1", "USE_SSH": "1"})
        assert result.exit_code == 0, result.output
        assert captured["config"].clone_depth == 1
        assert captured["config"].use_ssh

    def test_bad_clone_depth(self, captured):
        result = CliRunner().invoke(cli, [], env={"CLONE_DEPTH": "zero"})
        assert result.exit_code == 1
        assert "CLONE_DEPTH" in result.output
        assert "config" not in captured

    def test_profile_file(self, captured, tmp_path: Path):
        profile = tmp_path / "profile.yml"
        profile.write_text("baseline_packages: [Examples, Limex]\n")
        result = CliRunner().invoke(cli, ["--config", str(profile)])
        assert result.exit_code == 0, result.output
        assert captured["profile"].baseline_packages == ["Examples", "Limex"]

    def test_bad_profile_file(self, captured, tmp_path: Path):
        result = CliRunner().invoke(cli, ["-c", str(tmp_path / "missing.yml")])
        assert result.exit_code == 1
        assert "Profile file not found" in result.output

    def test_streams_through_click_echo(self, captured):
        CliRunner().invoke(cli, [])
        assert captured["kwargs"]["echo"] is not None
