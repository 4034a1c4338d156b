"""Abstract document store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Sequence

FILTER_OPERATORS = ("==", "in", "array-contains")


@dataclass(frozen=True)
class Document:
    """A snapshot of one stored document."""
    id: str
    data: dict[str, Any]


@dataclass(frozen=True)
class Filter:
    """Test on a top-level field.

    ``==`` compares a string value, ``in`` checks the value against a list of
    candidates and ``array-contains`` checks that a list field holds ``value``.
    """
    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in FILTER_OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op!r}")

    def matches(self, data: dict[str, Any]) -> bool:
        actual = data.get(self.field)
        if self.op == "==":
            return actual == self.value
        if self.op == "in":
            return actual in self.value
        return isinstance(actual, list) and self.value in actual


Listener = Callable[[Optional[Document]], None]
Unsubscribe = Callable[[], None]


def matches_all(data: dict[str, Any], filters: Iterable[Filter]) -> bool:
    return all(f.matches(data) for f in filters)


class DocumentStore(ABC):
    """Collection-addressed document storage with change subscriptions."""

    @abstractmethod
    async def add(self, collection: str, data: dict[str, Any]) -> str:
        """Create a document with a generated id and return the id."""
        pass

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        """Get a document, or None if it does not exist."""
        pass

    @abstractmethod
    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Create or replace a document under a caller-chosen id."""
        pass

    @abstractmethod
    async def update(self, collection: str, doc_id: str, changes: dict[str, Any]) -> None:
        """Merge top-level ``changes`` into an existing document.

        Raises ``DocumentNotFound`` if the document does not exist.
        """
        pass

    @abstractmethod
    async def update_if(
        self,
        collection: str,
        doc_id: str,
        changes: dict[str, Any],
        *,
        field: str,
        expected: Sequence[Any],
    ) -> bool:
        """Atomically merge ``changes`` only if ``data[field]`` is in ``expected``.

        Returns False (writing nothing) when the guard does not hold.
        Raises ``DocumentNotFound`` if the document does not exist.
        """
        pass

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        """Remove a document.  Deleting a missing document is a no-op."""
        pass

    @abstractmethod
    async def query(self, collection: str, filters: Sequence[Filter] = ()) -> list[Document]:
        """Return every document in ``collection`` matching all ``filters``."""
        pass

    @abstractmethod
    async def subscribe(self, collection: str, doc_id: str, listener: Listener) -> Unsubscribe:
        """Call ``listener`` now with the current snapshot and again on each change.

        The listener receives None while the document does not exist.  It may
        be called from another thread and may see the same state twice.
        """
        pass

    async def ping(self) -> None:
        """Raise if the backend is unreachable."""
        return None

    async def close(self) -> None:
        """Release connections held by the backend."""
        return None
