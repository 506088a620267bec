"""
Build profile: the ecosystem data the installer drives.

Package names, source URLs and CMake option identifiers belong to the
UG4 ecosystem, not to the installer, and they drift between UG4
releases. They live here as a validated model so a YAML file can
replace any part of them (see ``core.config.loader.load_profile``).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PackageSource(BaseModel):
    """A ughub package source registration (``ughub addsource``)."""

    name: str
    url: str


class FeatureOptions(BaseModel):
    """CMake option groups, one per optional feature."""

    model_config = ConfigDict(extra="forbid")

    promesh: dict[str, str] = Field(default_factory=lambda: {"ProMesh": "ON"})
    neuro: dict[str, str] = Field(
        default_factory=lambda: {
            "neuro_collection": "ON",
            "cable_neuron": "ON",
            "MembranePotentialMapping": "ON",
        }
    )
    superlu: dict[str, str] = Field(default_factory=lambda: {"SuperLU6": "ON"})
    parmetis: dict[str, str] = Field(default_factory=lambda: {"Parmetis": "ON"})
    # Companions of PARALLEL=ON, added only when MPI is actually usable.
    parallel: dict[str, str] = Field(default_factory=lambda: {"PCL_DEBUG_BARRIER": "ON"})


class BuildProfile(BaseModel):
    """Everything that is data rather than installer behavior."""

    model_config = ConfigDict(extra="forbid")

    baseline_packages: list[str] = Field(default_factory=lambda: ["Examples"])

    neuro_source: PackageSource = Field(
        default_factory=lambda: PackageSource(
            name="neurobox",
            url="https://github.com/NeuroBox3D/neurobox-packages.git",
        )
    )
    neuro_packages: list[str] = Field(
        default_factory=lambda: [
            "neuro_collection",
            "cable_neuron",
            "MembranePotentialMapping",
        ]
    )

    superlu_package: str = "SuperLU6"
    superlu_url: str = "https://github.com/xiaoyeli/superlu.git"
    superlu_dir_name: str = "superlu"

    parmetis_archive: str = "Parmetis.tar"
    parmetis_dir_name: str = "Parmetis"
    parmetis_alternate_names: list[str] = Field(default_factory=lambda: ["ParMETIS"])

    baseline_options: dict[str, str] = Field(
        default_factory=lambda: {
            "CMAKE_BUILD_TYPE": "Debug",
            "ConvectionDiffusion": "ON",
            "USE_LUA2C": "ON",
        }
    )
    feature_options: FeatureOptions = Field(default_factory=FeatureOptions)

    default_lapack_lib: str = "/usr/lib/x86_64-linux-gnu/lapack/liblapack.so"
    default_blas_lib: str = "/usr/lib/x86_64-linux-gnu/libblas.so"
