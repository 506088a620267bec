"""
Tests for the build configurator: option assembly and the retry.
"""

import pytest

from ug4bootstrap.adapters.mock import MockAdapter
from ug4bootstrap.adapters.registry import AdapterRegistry
from ug4bootstrap.core.domain.failure_signatures import Outcome
from ug4bootstrap.core.errors import ConfigureFailedError, InstallError, PreconditionError
from ug4bootstrap.core.models.action import Receipt
from ug4bootstrap.core.models.install import ToolchainSelection, WorkspacePaths
from ug4bootstrap.core.models.profile import BuildProfile, FeatureOptions
from ug4bootstrap.core.services.configure import (
    build_options,
    configure_build,
    library_retry_options,
)

SERIAL = ToolchainSelection(c_compiler="/usr/bin/gcc", cxx_compiler="/usr/bin/g++")
PARALLEL = ToolchainSelection(
    c_compiler="/usr/bin/mpicc", cxx_compiler="/usr/bin/mpicxx", parallel=True
)
DEGRADED = ToolchainSelection(
    c_compiler="/usr/bin/gcc", cxx_compiler="/usr/bin/g++", degraded=True
)


# ── Option assembly ─────────────────────────────────────────────


class TestBuildOptions:
    def test_baseline_only(self, make_config):
        options = build_options(make_config(), BuildProfile(), SERIAL)
        assert options.to_args() == [
            "-DPARALLEL=OFF",
            "-DCMAKE_BUILD_TYPE=Debug",
            "-DConvectionDiffusion=ON",
            "-DUSE_LUA2C=ON",
            "-DCMAKE_C_COMPILER=/usr/bin/gcc",
            "-DCMAKE_CXX_COMPILER=/usr/bin/g++",
        ]

    def test_everything_parallel(self, make_config):
        config = make_config(mpi=True, promesh=True, neuro=True, superlu=True, parmetis=True)
        options = build_options(config, BuildProfile(), PARALLEL)
        assert options.to_args() == [
            "-DPARALLEL=ON",
            "-DCMAKE_BUILD_TYPE=Debug",
            "-DConvectionDiffusion=ON",
            "-DUSE_LUA2C=ON",
            "-DProMesh=ON",
            "-Dneuro_collection=ON",
            "-Dcable_neuron=ON",
            "-DMembranePotentialMapping=ON",
            "-DSuperLU6=ON",
            "-DParmetis=ON",
            "-DPCL_DEBUG_BARRIER=ON",
            "-DCMAKE_C_COMPILER=/usr/bin/mpicc",
            "-DCMAKE_CXX_COMPILER=/usr/bin/mpicxx",
        ]

    def test_degraded_mpi_is_never_parallel(self, make_config):
        options = build_options(make_config(mpi=True, parmetis=True), BuildProfile(), DEGRADED)
        assert options.get("PARALLEL") == "OFF"
        assert "PCL_DEBUG_BARRIER" not in options
        assert options.get("Parmetis") == "ON"

    def test_profile_groups(self, make_config):
        profile = BuildProfile(
            baseline_options={"CMAKE_BUILD_TYPE": "Release"},
            feature_options=FeatureOptions(promesh={"ProMesh": "ON", "ProMeshGUI": "OFF"}),
        )
        options = build_options(make_config(promesh=True), profile, SERIAL)
        assert options.get("CMAKE_BUILD_TYPE") == "Release"
        assert options.get("ProMeshGUI") == "OFF"

    def test_conflicting_profile_rejected(self, make_config):
        profile = BuildProfile(baseline_options={"PARALLEL": "ON"})
        with pytest.raises(InstallError, match="PARALLEL"):
            build_options(make_config(), profile, SERIAL)


class TestLibraryRetryOptions:
    def test_defaults(self, make_config):
        libs = library_retry_options(make_config(), BuildProfile())
        assert libs == {
            "USER_LAPACK_LIBRARIES": "/usr/lib/x86_64-linux-gnu/lapack/liblapack.so",
            "USER_BLAS_LIBRARIES": "/usr/lib/x86_64-linux-gnu/libblas.so",
        }

    def test_overrides(self, make_config):
        config = make_config(lapack_lib="/opt/liblapack.so", blas_lib="/opt/libopenblas.so")
        libs = library_retry_options(config, BuildProfile())
        assert libs["USER_LAPACK_LIBRARIES"] == "/opt/liblapack.so"
        assert libs["USER_BLAS_LIBRARIES"] == "/opt/libopenblas.so"


# ── Configuration runs ──────────────────────────────────────────


def _workspace(config) -> WorkspacePaths:
    paths = WorkspacePaths.from_config(config)
    paths.workspace_dir.mkdir(parents=True)
    return paths


class TestConfigureBuild:
    def test_first_attempt_ok(self, make_config, registry, mocks):
        config = make_config()
        paths = _workspace(config)

        result = configure_build(config, paths, BuildProfile(), SERIAL, registry)

        assert result.attempts == 1 and not result.retried
        assert result.first_outcome is Outcome.OK
        assert mocks["cmake"].called_ids == ["configure-first"]
        action = mocks["cmake"].call_log[0].action
        assert action.cwd == str(paths.build_dir)
        assert action.argv[0] == "cmake" and action.argv[-1] == ".."
        assert (paths.build_dir / "cmake_first.log").exists()
        assert not (paths.build_dir / "cmake_with_blas_lapack.log").exists()

    def test_signature_with_zero_exit_retries(self, make_config, registry, mocks):
        mocks["cmake"].set_response(
            "configure-first",
            Receipt.success(
                adapter="cmake",
                action_id="configure-first",
                output="-- Looking for cheev_\nNo LAPACK package found\n-- Configuring done\n",
            ),
        )
        config = make_config()
        paths = _workspace(config)

        result = configure_build(config, paths, BuildProfile(), SERIAL, registry)

        assert result.first_outcome is Outcome.NEEDS_LIBRARY_RETRY
        assert result.attempts == 2
        assert mocks["cmake"].called_ids == ["configure-first", "configure-retry"]
        retry_argv = mocks["cmake"].call_log[1].action.argv
        assert "-DUSE_LUA2C=ON" in retry_argv
        assert "-DUSER_LAPACK_LIBRARIES=/usr/lib/x86_64-linux-gnu/lapack/liblapack.so" in retry_argv
        assert "-DUSER_BLAS_LIBRARIES=/usr/lib/x86_64-linux-gnu/libblas.so" in retry_argv
        assert retry_argv[-1] == ".."
        assert (paths.build_dir / "cmake_first.log").exists()
        assert (paths.build_dir / "cmake_with_blas_lapack.log").exists()

    def test_plain_failure_retries(self, make_config, registry, mocks):
        mocks["cmake"].set_failure("configure-first", output="CMake Error\n", return_code=1)
        config = make_config(lapack_lib="/opt/liblapack.so")
        result = configure_build(config, _workspace(config), BuildProfile(), SERIAL, registry)
        assert result.first_outcome is Outcome.FATAL
        assert result.retried
        assert result.options.get("USER_LAPACK_LIBRARIES") == "/opt/liblapack.so"

    def test_retry_success_ignores_signatures(self, make_config, registry, mocks):
        mocks["cmake"].set_failure("configure-first", output="A library with BLAS API not found\n")
        mocks["cmake"].set_response(
            "configure-retry",
            Receipt.success(
                adapter="cmake", action_id="configure-retry", output="LAPACK requires BLAS\n"
            ),
        )
        config = make_config()
        result = configure_build(config, _workspace(config), BuildProfile(), SERIAL, registry)
        assert result.attempts == 2

    def test_retry_failure_names_both_logs(self, make_config, registry, mocks):
        mocks["cmake"].set_failure("configure-first", output="No LAPACK package found\n")
        mocks["cmake"].set_failure("configure-retry", output="still broken\n")
        config = make_config()
        paths = _workspace(config)

        with pytest.raises(ConfigureFailedError) as exc:
            configure_build(config, paths, BuildProfile(), SERIAL, registry)

        message = str(exc.value)
        assert str(paths.build_dir / "cmake_first.log") in message
        assert str(paths.build_dir / "cmake_with_blas_lapack.log") in message
        assert mocks["cmake"].call_count == 2

    def test_mpi_hint_only_when_parallel(self, make_config, registry, mocks, caplog):
        mocks["cmake"].set_failure("configure-first")
        mocks["cmake"].set_failure("configure-retry")
        config = make_config(mpi=True)

        with caplog.at_level("WARNING"), pytest.raises(ConfigureFailedError):
            configure_build(config, _workspace(config), BuildProfile(), PARALLEL, registry)
        assert "mpi variants of BLAS/LAPACK" in caplog.text

        caplog.clear()
        mocks["cmake"].reset()
        mocks["cmake"].set_failure("configure-first")
        mocks["cmake"].set_failure("configure-retry")
        with caplog.at_level("WARNING"), pytest.raises(ConfigureFailedError):
            configure_build(config, WorkspacePaths.from_config(config), BuildProfile(), DEGRADED, registry)
        assert "mpi variants" not in caplog.text

    def test_existing_build_dir_reused(self, make_config, registry):
        config = make_config()
        paths = _workspace(config)
        paths.build_dir.mkdir()
        (paths.build_dir / "CMakeCache.txt").write_text("cache")
        configure_build(config, paths, BuildProfile(), SERIAL, registry)
        assert (paths.build_dir / "CMakeCache.txt").exists()

    def test_cmake_missing(self, make_config):
        registry = AdapterRegistry()
        registry.register(MockAdapter(adapter_name="cmake", available=False))
        config = make_config()
        with pytest.raises(PreconditionError, match="cmake"):
            configure_build(config, _workspace(config), BuildProfile(), SERIAL, registry)

    def test_build_path_is_a_file(self, make_config, registry, mocks):
        config = make_config()
        paths = _workspace(config)
        paths.build_dir.write_text("stray")
        with pytest.raises(PreconditionError, match="not a directory"):
            configure_build(config, paths, BuildProfile(), SERIAL, registry)
        assert mocks["cmake"].call_count == 0
