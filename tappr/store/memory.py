"""In-memory document store for local development and tests."""

from __future__ import annotations

import copy
import threading
import uuid
from typing import Any, Callable, Optional, Sequence

from tappr.errors import DocumentNotFound

from .base import Document, DocumentStore, Filter, Listener, Unsubscribe, matches_all
from .listeners import ListenerRegistry, deliver


class MemoryDocumentStore(DocumentStore):
    """Process-local store; every read and write works on deep copies."""

    def __init__(self):
        self._lock = threading.Lock()
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._listeners = ListenerRegistry()

    def _write(self, collection: str, doc_id: str, data: dict[str, Any]) -> Document:
        stored = copy.deepcopy(data)
        self._collections.setdefault(collection, {})[doc_id] = stored
        return Document(doc_id, stored)

    def _merge(
        self,
        collection: str,
        doc_id: str,
        changes: dict[str, Any],
        guard: Optional[Callable[[dict[str, Any]], bool]] = None,
    ) -> bool:
        with self._lock:
            current = self._collections.get(collection, {}).get(doc_id)
            if current is None:
                raise DocumentNotFound(collection, doc_id)
            if guard is not None and not guard(current):
                return False
            snapshot = self._write(collection, doc_id, {**current, **changes})
        self._listeners.notify(collection, doc_id, snapshot)
        return True

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        with self._lock:
            snapshot = self._write(collection, doc_id, data)
        self._listeners.notify(collection, doc_id, snapshot)
        return doc_id

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            data = self._collections.get(collection, {}).get(doc_id)
            if data is None:
                return None
            return Document(doc_id, copy.deepcopy(data))

    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        with self._lock:
            snapshot = self._write(collection, doc_id, data)
        self._listeners.notify(collection, doc_id, snapshot)

    async def update(self, collection: str, doc_id: str, changes: dict[str, Any]) -> None:
        self._merge(collection, doc_id, changes)

    async def update_if(
        self,
        collection: str,
        doc_id: str,
        changes: dict[str, Any],
        *,
        field: str,
        expected: Sequence[Any],
    ) -> bool:
        return self._merge(
            collection, doc_id, changes, guard=lambda data: data.get(field) in expected
        )

    async def delete(self, collection: str, doc_id: str) -> None:
        with self._lock:
            removed = self._collections.get(collection, {}).pop(doc_id, None)
        if removed is not None:
            self._listeners.notify(collection, doc_id, None)

    async def query(self, collection: str, filters: Sequence[Filter] = ()) -> list[Document]:
        with self._lock:
            items = list(self._collections.get(collection, {}).items())
        return [
            Document(doc_id, copy.deepcopy(data))
            for doc_id, data in items
            if matches_all(data, filters)
        ]

    async def subscribe(self, collection: str, doc_id: str, listener: Listener) -> Unsubscribe:
        unsubscribe = self._listeners.add(collection, doc_id, listener)
        deliver(listener, await self.get(collection, doc_id))
        return unsubscribe

    def listener_count(self, collection: str, doc_id: str) -> int:
        return self._listeners.count(collection, doc_id)
