"""Key-value persistence backends for the repository.

Each key holds one JSON document. ``JsonFileStore`` keeps ``<key>.json`` files
under a base directory and replaces them atomically; ``MemoryStore`` serves
tests and dry runs. Both raise ``PersistenceError`` instead of leaking
``OSError``/``JSONDecodeError`` to callers.
"""

from __future__ import annotations

import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict

from backend.core.logging import get_logger

from .errors import PersistenceError

logger = get_logger(__name__)

_MISSING = object()


class KeyValueStore:
    """Minimal interface the repository depends on."""

    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def contains(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING


class MemoryStore(KeyValueStore):
    def __init__(self, initial: Dict[str, Any] | None = None) -> None:
        self._data: Dict[str, Any] = copy.deepcopy(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def contains(self, key: str) -> bool:
        return key in self._data


class JsonFileStore(KeyValueStore):
    def __init__(self, base_dir: Path | str) -> None:
        self.base_dir = Path(base_dir)

    def _path(self, key: str) -> Path:
        return self.base_dir / f"{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        if not path.exists():
            return default
        try:
            with path.open("r", encoding="utf-8") as fp:
                return json.load(fp)
        except (OSError, json.JSONDecodeError) as err:
            logger.error("Failed to read %s: %s", path, err)
            raise PersistenceError(f"cannot read '{key}': {err}", key=key) from err

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        tmp_name: str | None = None
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{key}.", suffix=".tmp", dir=self.base_dir
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fp:
                json.dump(value, fp, indent=2, ensure_ascii=False)
                fp.flush()
                os.fsync(fp.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as err:
            logger.error("Failed to write %s: %s", path, err)
            raise PersistenceError(f"cannot write '{key}': {err}", key=key) from err
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as err:
            raise PersistenceError(f"cannot delete '{key}': {err}", key=key) from err

    def contains(self, key: str) -> bool:
        return self._path(key).exists()
