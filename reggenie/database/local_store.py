"""File-backed key/value store used as the local cache.

Mirrors browser local storage: string keys, string values, whole-file
persistence. JSON helpers cover the common case of storing arrays of records.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from reggenie.config.settings import settings

logger = logging.getLogger(__name__)


class LocalStorage:
    """String key/value store persisted to a single JSON file."""

    def __init__(self, path: str):
        self.path = Path(path)
        self._lock = threading.RLock()
        self._data: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("local storage file must hold a JSON object")
            return {str(k): str(v) for k, v in data.items()}
        except (OSError, ValueError) as e:
            logger.error(f"Local storage at {self.path} unreadable, starting empty: {e}")
            return {}

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, ensure_ascii=False)
        tmp_path.replace(self.path)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value
            self._flush()

    def remove_item(self, key: str) -> None:
        with self._lock:
            if self._data.pop(key, None) is not None:
                self._flush()

    def get_json(self, key: str, default: Any = None) -> Any:
        """Decode a stored JSON value, returning default when absent or corrupt."""
        raw = self.get_item(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.error(f"Corrupt JSON under local storage key '{key}': {e}")
            return default

    def set_json(self, key: str, value: Any) -> None:
        self.set_item(key, json.dumps(value, ensure_ascii=False))

    def update_json(self, key: str, mutate: Callable[[Any], Any], default: Any = None) -> Any:
        """Read, mutate and write one JSON value while holding the store lock."""
        with self._lock:
            value = mutate(self.get_json(key, default))
            self.set_json(key, value)
            return value


# Global local storage instance
local_storage: Optional[LocalStorage] = None


def get_local_storage() -> LocalStorage:
    """Get local storage (dependency injection)."""
    global local_storage
    if not local_storage:
        local_storage = LocalStorage(settings.local_storage_path)
    return local_storage
