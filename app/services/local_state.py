# app/services/local_state.py
"""
Small persisted key/value store: one JSON document on disk.

Holds the lookup cache and recent searches on the server side, and the
device identity / remembered username / session token for the staff client.
Write failures are logged, never raised: losing a cache entry is harmless.
"""

import json
import os
import threading
from typing import Any, Optional

from app.utils.logger import get_logger

logger = get_logger(__name__)


class JsonStateStore:
    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        self._data: Optional[dict] = None

    def _load(self) -> dict:
        if self._data is None:
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    self._data = json.load(f)
                if not isinstance(self._data, dict):
                    raise ValueError("state file is not a JSON object")
            except FileNotFoundError:
                self._data = {}
            except (OSError, ValueError) as e:
                logger.warning(f"State file {self.path} unreadable, starting empty: {e}")
                self._data = {}
        return self._data

    def _flush(self):
        tmp_path = f"{self.path}.tmp"
        try:
            os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Saving state to {self.path} failed: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._load().get(key, default)

    def set(self, key: str, value: Any):
        with self._lock:
            self._load()[key] = value
            self._flush()

    def remove(self, key: str):
        with self._lock:
            if self._load().pop(key, None) is not None:
                self._flush()

    def keys(self, prefix: str = "") -> list[str]:
        with self._lock:
            return [k for k in self._load() if k.startswith(prefix)]

    def remove_many(self, keys):
        """Drop several keys with a single write."""
        with self._lock:
            data = self._load()
            removed = [k for k in keys if data.pop(k, None) is not None]
            if removed:
                self._flush()
