"""In-process fan-out of document changes to subscribers."""

from __future__ import annotations

import copy
import threading
from collections import defaultdict
from typing import Optional

import structlog

from .base import Document, Listener, Unsubscribe

logger = structlog.get_logger("tappr.store.listeners")


class ListenerRegistry:
    """Tracks listeners per ``(collection, doc_id)`` and notifies them."""

    def __init__(self):
        self._lock = threading.Lock()
        self._listeners: dict[tuple[str, str], list[Listener]] = defaultdict(list)

    def add(self, collection: str, doc_id: str, listener: Listener) -> Unsubscribe:
        key = (collection, doc_id)
        with self._lock:
            self._listeners[key].append(listener)

        def unsubscribe() -> None:
            with self._lock:
                listeners = self._listeners.get(key, [])
                if listener in listeners:
                    listeners.remove(listener)
                if not listeners:
                    self._listeners.pop(key, None)

        return unsubscribe

    def count(self, collection: str, doc_id: str) -> int:
        with self._lock:
            return len(self._listeners.get((collection, doc_id), []))

    def notify(self, collection: str, doc_id: str, snapshot: Optional[Document]) -> None:
        with self._lock:
            listeners = list(self._listeners.get((collection, doc_id), []))
        for listener in listeners:
            deliver(listener, snapshot)


def deliver(listener: Listener, snapshot: Optional[Document]) -> None:
    """Invoke one listener with a private copy; a failing listener is logged."""
    if snapshot is not None:
        snapshot = Document(snapshot.id, copy.deepcopy(snapshot.data))
    try:
        listener(snapshot)
    except Exception:
        logger.exception("listener_failed", doc_id=snapshot.id if snapshot else None)
