"""
Tests for Microsoft MPI provisioning (privilege check, install routes).
"""

import sys
from pathlib import Path

import pytest

from ug4bootstrap.core.errors import CommandFailedError, ElevationRequired, InstallError
from ug4bootstrap.core.services import msmpi


class TestPrivilege:
    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX check")
    def test_root_is_privileged(self, monkeypatch):
        monkeypatch.setattr(msmpi.os, "geteuid", lambda: 0)
        assert msmpi.has_required_privilege()

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX check")
    def test_user_is_not(self, monkeypatch):
        monkeypatch.setattr(msmpi.os, "geteuid", lambda: 1000)
        assert not msmpi.has_required_privilege()

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX check")
    def test_relaunch_only_on_windows(self):
        with pytest.raises(InstallError, match="only supported on Windows"):
            msmpi.relaunch_elevated(["-mpi"])


class TestInstall:
    @pytest.fixture(autouse=True)
    def _admin(self, monkeypatch):
        monkeypatch.setattr(msmpi, "has_required_privilege", lambda: True)

    def test_requires_privilege(self, registry, mocks, monkeypatch):
        monkeypatch.setattr(msmpi, "has_required_privilege", lambda: False)
        with pytest.raises(ElevationRequired):
            msmpi.install_msmpi(registry)
        assert mocks["shell"].call_count == 0

    def test_winget_route(self, registry, mocks, monkeypatch):
        monkeypatch.setattr(msmpi.shutil, "which", lambda name: "winget.exe" if name == "winget" else None)
        msmpi.install_msmpi(registry)
        assert mocks["shell"].called_ids == ["winget-Microsoft.msmpi", "winget-Microsoft.msmpisdk"]
        argv = mocks["shell"].call_log[0].action.argv
        assert argv[:4] == ["winget", "install", "--id", "Microsoft.msmpi"]
        assert "--silent" in argv

    def test_download_route(self, registry, mocks, monkeypatch, tmp_path: Path):
        monkeypatch.setattr(msmpi.shutil, "which", lambda name: None)
        downloaded: list[str] = []

        def fake_download(url: str, dest_dir: Path) -> Path:
            downloaded.append(url)
            target = dest_dir / url.rsplit("/", 1)[-1]
            target.write_bytes(b"installer")
            return target

        monkeypatch.setattr(msmpi, "_download", fake_download)
        msmpi.install_msmpi(registry, download_dir=tmp_path)

        assert downloaded == [msmpi.MSMPI_RUNTIME_URL, msmpi.MSMPI_SDK_URL]
        assert mocks["shell"].called_ids == ["msmpi-runtime", "msmpi-sdk"]
        runtime, sdk = (ctx.action.argv for ctx in mocks["shell"].call_log)
        assert runtime[0].endswith("msmpisetup.exe")
        assert runtime[1:] == ["-unattend", "-force"]
        assert sdk[:2] == ["msiexec", "/i"]
        assert "/qn" in sdk

    def test_winget_failure_falls_back(self, registry, mocks, monkeypatch, tmp_path: Path):
        monkeypatch.setattr(msmpi.shutil, "which", lambda name: "winget.exe" if name == "winget" else None)
        mocks["shell"].set_failure("winget-Microsoft.msmpi")
        monkeypatch.setattr(
            msmpi, "_download", lambda url, d: (d / url.rsplit("/", 1)[-1])
        )
        msmpi.install_msmpi(registry, download_dir=tmp_path)
        assert mocks["shell"].called_ids == ["winget-Microsoft.msmpi", "msmpi-runtime", "msmpi-sdk"]

    def test_installer_failure_is_fatal(self, registry, mocks, monkeypatch, tmp_path: Path):
        monkeypatch.setattr(msmpi.shutil, "which", lambda name: None)
        monkeypatch.setattr(msmpi, "_download", lambda url, d: (d / url.rsplit("/", 1)[-1]))
        mocks["shell"].set_failure("msmpi-runtime", return_code=1603)
        with pytest.raises(CommandFailedError) as exc:
            msmpi.install_msmpi(registry, download_dir=tmp_path)
        assert exc.value.return_code == 1603
        assert mocks["shell"].called_ids == ["msmpi-runtime"]

    def test_download_error(self, tmp_path: Path, monkeypatch):
        def refuse(*args, **kwargs):
            raise OSError("network unreachable")

        monkeypatch.setattr(msmpi.urllib.request, "urlopen", refuse)
        with pytest.raises(CommandFailedError, match="network unreachable"):
            msmpi._download("https://example.invalid/msmpisetup.exe", tmp_path)
