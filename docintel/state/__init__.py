# docintel/state/__init__.py
from docintel.state.storage import (
    KeyValueStorage, MemoryStorage, JsonFileStorage, SqlStorage, ScopedStorage, create_storage
)
from docintel.state.store import DataStore, ROOT_FOLDER_ID
from docintel.state.registry import StateRegistry, state_registry

__all__ = [
    "KeyValueStorage",
    "MemoryStorage",
    "JsonFileStorage",
    "SqlStorage",
    "ScopedStorage",
    "create_storage",
    "DataStore",
    "ROOT_FOLDER_ID",
    "StateRegistry",
    "state_registry",
]
