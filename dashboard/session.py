"""Client-side session held in a persistent key-value store."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterator, MutableMapping, Optional

TOKEN_KEY = "authToken"
USER_KEY = "userId"


class JsonFileStorage(MutableMapping[str, str]):
    """String key-value store persisted to a JSON file on every write."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._items: Dict[str, str] = {}
        self._load_from_disk()

    def __getitem__(self, key: str) -> str:
        return self._items[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._items[key] = value
        self._persist()

    def __delitem__(self, key: str) -> None:
        del self._items[key]
        self._persist()

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def _persist(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._items, indent=2, sort_keys=True))

    def _load_from_disk(self) -> None:
        if not self.path.exists():
            return

        # An unreadable file is treated as an empty store, i.e. logged out.
        try:
            data = json.loads(self.path.read_text() or "{}")
        except (OSError, json.JSONDecodeError):
            data = {}

        if isinstance(data, dict):
            self._items = {str(key): str(value) for key, value in data.items()}


class Session:
    """Read and clear access to the stored authentication token.

    The dashboard never issues tokens; it only checks for one and discards it
    on logout or when the backend rejects it.
    """

    def __init__(self, storage: MutableMapping[str, str]) -> None:
        self._storage = storage

    def token(self) -> Optional[str]:
        value = self._storage.get(TOKEN_KEY)
        return value or None

    def user_id(self) -> Optional[str]:
        return self._storage.get(USER_KEY) or None

    def clear(self) -> None:
        self._storage.pop(TOKEN_KEY, None)
        self._storage.pop(USER_KEY, None)
