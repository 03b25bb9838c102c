"""Storage backends and the JSON store adapter."""

from levelist.infrastructure.storage.base import KeyValueStore
from levelist.infrastructure.storage.file_store import FileKeyValueStore
from levelist.infrastructure.storage.memory_store import InMemoryKeyValueStore
from levelist.infrastructure.storage.store_adapter import StoreAdapter

__all__ = [
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "StoreAdapter",
]
