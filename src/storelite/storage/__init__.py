"""Storage backends for the persist middleware."""

from storelite.storage.file import FileStorage
from storelite.storage.memory import MemoryStorage, shared_memory_storage
from storelite.storage.models import StorageValue
from storelite.storage.protocol import PersistStorage, StateStorage
from storelite.storage.serialized import JSONStorage, create_json_storage, default_storage

__all__ = [
    # Protocols
    "StateStorage",
    "PersistStorage",
    # Records
    "StorageValue",
    # Backends
    "MemoryStorage",
    "FileStorage",
    "JSONStorage",
    "create_json_storage",
    "default_storage",
    "shared_memory_storage",
]
