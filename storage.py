"""
Key-value persistence of serialized ledger state
"""
from __future__ import annotations
import json
import logging
import os
import tempfile
from typing import Dict, Optional, Protocol

from errors import StorageError

logger = logging.getLogger(__name__)


class LedgerStore(Protocol):
    """What the engine needs from a store"""

    def save(self, key: str, state: dict) -> None: ...

    def load(self, key: str) -> Optional[dict]: ...

    def clear(self, key: str) -> None: ...


class JsonFileStore:
    """One <key>.json file per key inside a directory"""

    def __init__(self, directory: str):
        self.directory = directory

    def path_for(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def save(self, key: str, state: dict) -> None:
        os.makedirs(self.directory, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self.directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(state, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path_for(key))
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise
        logger.debug("Saved %s to %s", key, self.path_for(key))

    def load(self, key: str) -> Optional[dict]:
        try:
            with open(self.path_for(key), "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except json.JSONDecodeError as ex:
            raise StorageError(f"Stored ledger {key!r} is not valid JSON: {ex}") from ex
        if not isinstance(data, dict):
            raise StorageError(f"Stored ledger {key!r} is not a JSON object")
        return data

    def clear(self, key: str) -> None:
        try:
            os.remove(self.path_for(key))
        except FileNotFoundError:
            pass


class MemoryStore:
    """In-process store; keeps JSON text so saved state is detached from the caller's objects"""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def save(self, key: str, state: dict) -> None:
        self._data[key] = json.dumps(state, ensure_ascii=False)

    def load(self, key: str) -> Optional[dict]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def clear(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data
