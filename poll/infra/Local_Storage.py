"""Local persistent key/value storage (file persistence).

Mirrors browser localStorage: string keys map to string values, and the whole
mapping lives in one JSON file that is replaced atomically on every write.
"""
import json
import os
import shutil
import tempfile
import logging
from pathlib import Path
from threading import Lock
from typing import Dict, List, Optional

from poll.infra.errors import PersistenceError

logger = logging.getLogger(__name__)


class LocalStorage:
    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = Lock()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Cannot read local storage {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceError(f"Local storage {self.path} does not hold a key/value object")
        return data

    def _atomic_write(self, data: Dict[str, str]):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".storage_", suffix=".json")
        except OSError as e:
            raise PersistenceError(f"Cannot write local storage {self.path}: {e}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(data, tmp, indent=2, ensure_ascii=False)
            shutil.move(tmp_path, str(self.path))
        except OSError as e:
            raise PersistenceError(f"Cannot write local storage {self.path}: {e}") from e
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def set_item(self, key: str, value: str):
        with self._lock:
            data = self._load()
            data[key] = value
            self._atomic_write(data)
        logger.debug("Stored %s (%d chars)", key, len(value))

    def remove_item(self, key: str):
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._atomic_write(data)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._load().keys())

    def clear(self):
        with self._lock:
            self._atomic_write({})
