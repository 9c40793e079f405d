"""Persistence for quizbank state."""

from .gateway import PersistenceGateway
from .store import JsonFileStore, KeyValueStore, MemoryStore

__all__ = [
    "PersistenceGateway",
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
]
