"""Key-value store and service adapters."""
from __future__ import annotations

from .kv import (
    DisabledKeyValueStore,
    FileKeyValueStore,
    InMemoryKeyValueStore,
    RestKeyValueStore,
    create_shared_store,
)
from .services import ServiceClient

__all__ = [
    'DisabledKeyValueStore',
    'FileKeyValueStore',
    'InMemoryKeyValueStore',
    'RestKeyValueStore',
    'ServiceClient',
    'create_shared_store',
]
