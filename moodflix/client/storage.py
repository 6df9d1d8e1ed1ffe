"""
Key/value storage backing the client's offline state.

Values are strings, as in browser localStorage. With a path the whole map is
persisted as one JSON file, replaced atomically on every write; without one
it lives in memory only.
"""
from pathlib import Path
from typing import Any, Dict, Optional
import json
import logging
import os
import tempfile
import threading

from moodflix.client.errors import StorageError

logger = logging.getLogger(__name__)


class LocalStorage:
    def __init__(self, path: Optional[str] = None):
        self.path = Path(path) if path else None
        self._items: Dict[str, str] = {}
        self._lock = threading.RLock()
        if self.path and self.path.exists():
            self._items = self._read()

    @classmethod
    def from_env(cls) -> "LocalStorage":
        """Storage at MOODFLIX_STORAGE_PATH, or in-memory when unset"""
        return cls(os.getenv("MOODFLIX_STORAGE_PATH") or None)

    def _read(self) -> Dict[str, str]:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            raise StorageError(f"Could not read storage file {self.path}: {str(e)}")
        if not isinstance(data, dict):
            raise StorageError(f"Storage file {self.path} does not hold an object")
        return {str(k): str(v) for k, v in data.items()}

    def _flush(self, items: Dict[str, str]):
        if not self.path:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".moodflix-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(items, fh)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StorageError(f"Could not write storage file {self.path}: {str(e)}")

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str):
        with self._lock:
            items = dict(self._items)
            items[key] = value
            self._flush(items)
            self._items = items

    def remove_item(self, key: str):
        with self._lock:
            if key not in self._items:
                return
            items = dict(self._items)
            del items[key]
            self._flush(items)
            self._items = items

    def clear(self):
        with self._lock:
            self._flush({})
            self._items = {}

    def get_json(self, key: str, default: Any = None) -> Any:
        raw = self.get_item(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Ignoring corrupt value stored under {key}")
            return default

    def set_json(self, key: str, value: Any):
        self.set_item(key, json.dumps(value))
