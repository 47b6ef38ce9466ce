"""Persistent storage for training history."""

from .history_store import HistoryStore, JsonFileStore, HISTORY_KEY

__all__ = [
    "HistoryStore",
    "JsonFileStore",
    "HISTORY_KEY",
]
