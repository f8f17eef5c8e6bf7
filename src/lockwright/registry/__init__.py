"""Package registries consulted during resolution.

Public API::

    from lockwright.registry import RegistryLookup, InMemoryRegistry, HttpRegistry
"""

from __future__ import annotations

from lockwright.registry.base import CachedLookup, RegistryLookup
from lockwright.registry.memory import InMemoryRegistry
from lockwright.registry.http_registry import HttpRegistry

__all__ = [
    "CachedLookup",
    "HttpRegistry",
    "InMemoryRegistry",
    "RegistryLookup",
]
