from __future__ import annotations
import json
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import List, Optional

from pydantic import ValidationError

from app.schemas import SnapshotDocument
from settings import get_settings


class StoreError(RuntimeError):
    """Raised when the container cannot be read or holds malformed documents."""


class MockCosmosContainer:
    """In-process stand-in for a document container of sensor snapshots."""

    def __init__(self, name: str, persistence_path: Optional[Path] = None) -> None:
        self.name = name
        self._documents: List[SnapshotDocument] = []
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)

    def create_item(self, document: SnapshotDocument) -> None:
        with self._lock:
            self._load_from_disk()
            self._documents.append(document.model_copy(deep=True))
            self._persist()

    def query_latest(self, device_id: Optional[str] = None) -> List[SnapshotDocument]:
        """Return the newest document as a list of zero or one items.

        Equivalent to ``SELECT TOP 1 * FROM c [WHERE c.deviceId = @id]
        ORDER BY c.timestamp DESC``. On equal timestamps the earliest stored
        document wins.
        """

        with self._lock:
            self._load_from_disk()
            candidates = [
                document
                for document in self._documents
                if device_id is None or document.device_id == device_id
            ]
            if not candidates:
                return []
            newest = max(candidates, key=lambda document: document.timestamp)
            return [newest.model_copy(deep=True)]

    def scan(self) -> list[SnapshotDocument]:
        with self._lock:
            self._load_from_disk()
            return [document.model_copy(deep=True) for document in self._documents]

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = [
            document.model_dump(mode="json", by_alias=True) for document in self._documents
        ]
        self.persistence_path.write_text(json.dumps(payload, indent=2))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "[]"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"Container {self.name!r} could not be read.") from exc

        if not isinstance(data, list):
            raise StoreError(f"Container {self.name!r} does not hold a document list.")

        try:
            self._documents = [SnapshotDocument.model_validate(item) for item in data]
        except ValidationError as exc:
            raise StoreError(f"Container {self.name!r} holds a malformed document.") from exc


@lru_cache
def build_default_container(
    name: Optional[str] = None,
    path: Optional[str] = None,
) -> MockCosmosContainer:
    settings = get_settings()
    container_name = settings.container_name if name is None else name
    container_path = settings.container_persistence_path if path is None else path
    persistence = Path(container_path) if container_path else None
    return MockCosmosContainer(name=container_name, persistence_path=persistence)
