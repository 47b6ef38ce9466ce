"""Durable key-value storage and the breath history kept in it."""

import os
import json
import math
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


logger = logging.getLogger(__name__)

HISTORY_KEY = "VocalTrainingHistory"


class JsonFileStore:
    """Key-value store backed by a single JSON document on disk."""

    def __init__(self, file_path: str):
        """Initialize the store.

        Args:
            file_path: JSON file holding all keys; created on first write
        """
        self.file_path = Path(file_path)
        self.lock = threading.Lock()
        logger.info(f"JsonFileStore initialized with file: {self.file_path}")

    def _read_document(self) -> Dict[str, Any]:
        if not self.file_path.exists():
            return {}
        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Unreadable store file {self.file_path}, treating as empty: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Store file {self.file_path} does not hold a JSON object, treating as empty")
            return {}
        return data

    def get(self, key: str) -> Optional[Any]:
        """Return the value stored under ``key`` or None."""
        with self.lock:
            return self._read_document().get(key)

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, rewriting the file atomically."""
        with self.lock:
            document = self._read_document()
            document[key] = value

            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.file_path.with_name(self.file_path.name + ".tmp")
            try:
                with open(tmp_path, 'w', encoding='utf-8') as f:
                    json.dump(document, f, indent=2)
                os.replace(tmp_path, self.file_path)
            except (OSError, TypeError, ValueError) as e:
                logger.error(f"Error writing store file {self.file_path}: {e}")
                if tmp_path.exists():
                    tmp_path.unlink()
                raise
        logger.debug(f"Stored key '{key}' in {self.file_path}")


def _is_record(value: Any) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(float(value))
    except OverflowError:
        # JSON integers have no size limit
        return False


class HistoryStore:
    """Most-recent-first list of best breath results.

    The list only grows: ``append`` prepends a value and writes the whole
    list back to the key-value store. Memory is updated only after the write
    succeeded, so both always agree.
    """

    def __init__(self, store, key: str = HISTORY_KEY):
        self.store = store
        self.key = key
        self.lock = threading.Lock()
        self._records: List[float] = []

    @property
    def records(self) -> Tuple[float, ...]:
        with self.lock:
            return tuple(self._records)

    def load_all(self) -> Tuple[float, ...]:
        """Read the persisted history, dropping anything that is not a number."""
        raw = self.store.get(self.key)
        if raw is None:
            values: List[float] = []
        elif not isinstance(raw, list):
            logger.warning(f"Ignoring malformed history under '{self.key}': {type(raw).__name__}")
            values = []
        else:
            values = [float(v) for v in raw if _is_record(v)]
            dropped = len(raw) - len(values)
            if dropped:
                logger.warning(f"Dropped {dropped} malformed history entries")

        with self.lock:
            self._records = values
        logger.info(f"Loaded {len(values)} history records")
        return tuple(values)

    def append(self, value: float) -> Tuple[float, ...]:
        """Prepend ``value`` and persist the full list.

        Returns:
            The updated history, most recent first
        """
        record = float(value)
        if not math.isfinite(record):
            raise ValueError(f"History value must be finite, got {value!r}")

        with self.lock:
            updated = [record] + self._records
            self.store.set(self.key, updated)
            self._records = updated
            logger.info(f"Recorded breath result {record:.1f}s ({len(updated)} total)")
            return tuple(updated)
