"""Adapters: bindings for the external tools the installer drives.

Public re-exports for convenient access.
"""

from ug4bootstrap.adapters.base import Adapter, ExecutionContext
from ug4bootstrap.adapters.mock import MockAdapter
from ug4bootstrap.adapters.registry import AdapterRegistry, default_registry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
    "default_registry",
]
