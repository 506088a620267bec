"""
Domain models for the installer.

All models are re-exported here for convenient access:

    from ug4bootstrap.core.models import InstallConfig, WorkspacePaths, Receipt
"""

from ug4bootstrap.core.models.action import Action, Receipt
from ug4bootstrap.core.models.install import (
    BuildOptionSet,
    ExternalSourceBundle,
    InstallConfig,
    ToolchainSelection,
    WorkspacePaths,
)
from ug4bootstrap.core.models.profile import BuildProfile, FeatureOptions, PackageSource

__all__ = [
    # action.py
    "Action",
    "Receipt",
    # install.py
    "BuildOptionSet",
    "ExternalSourceBundle",
    "InstallConfig",
    "ToolchainSelection",
    "WorkspacePaths",
    # profile.py
    "BuildProfile",
    "FeatureOptions",
    "PackageSource",
]
