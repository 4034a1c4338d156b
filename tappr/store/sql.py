"""SQLAlchemy-backed document store (Postgres in production)."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Sequence

import structlog
from sqlalchemy import delete, select, text, update
from sqlalchemy.ext.asyncio import AsyncEngine

from tappr.database import create_session_factory
from tappr.errors import DocumentNotFound, WriteConflict
from tappr.models.document import StoredDocument

from .base import Document, DocumentStore, Filter, Listener, Unsubscribe, matches_all
from .listeners import ListenerRegistry, deliver

logger = structlog.get_logger("tappr.store.sql")

# Optimistic-write retries before giving up with WriteConflict
_MAX_WRITE_ATTEMPTS = 5


class SqlDocumentStore(DocumentStore):
    """Documents in one ``documents`` table, JSON payload per row.

    Writes are guarded by the row ``version`` so concurrent writers never
    overwrite each other.  Subscriptions are served in-process: listeners
    see every change written through this store instance.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._session_factory = create_session_factory(engine)
        self._listeners = ListenerRegistry()

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        async with self._session_factory() as session:
            session.add(StoredDocument(collection=collection, id=doc_id, data=data, version=1))
            await session.commit()
        self._listeners.notify(collection, doc_id, Document(doc_id, data))
        return doc_id

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        async with self._session_factory() as session:
            row = await session.get(StoredDocument, (collection, doc_id))
            if row is None:
                return None
            return Document(row.id, dict(row.data))

    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        async with self._session_factory() as session:
            row = await session.get(StoredDocument, (collection, doc_id))
            if row is None:
                session.add(StoredDocument(collection=collection, id=doc_id, data=data, version=1))
            else:
                row.data = data
                row.version = row.version + 1
                row.updated_at = datetime.now(timezone.utc)
            await session.commit()
        self._listeners.notify(collection, doc_id, Document(doc_id, data))

    async def update(self, collection: str, doc_id: str, changes: dict[str, Any]) -> None:
        await self._compare_and_swap(collection, doc_id, changes)

    async def update_if(
        self,
        collection: str,
        doc_id: str,
        changes: dict[str, Any],
        *,
        field: str,
        expected: Sequence[Any],
    ) -> bool:
        return await self._compare_and_swap(
            collection, doc_id, changes, guard=lambda data: data.get(field) in expected
        )

    async def _compare_and_swap(
        self,
        collection: str,
        doc_id: str,
        changes: dict[str, Any],
        guard: Optional[Callable[[dict[str, Any]], bool]] = None,
    ) -> bool:
        for attempt in range(1, _MAX_WRITE_ATTEMPTS + 1):
            async with self._session_factory() as session:
                row = await session.get(StoredDocument, (collection, doc_id))
                if row is None:
                    raise DocumentNotFound(collection, doc_id)
                if guard is not None and not guard(row.data):
                    return False

                merged = {**row.data, **changes}
                result = await session.execute(
                    update(StoredDocument)
                    .where(
                        StoredDocument.collection == collection,
                        StoredDocument.id == doc_id,
                        StoredDocument.version == row.version,
                    )
                    .values(
                        data=merged,
                        version=row.version + 1,
                        updated_at=datetime.now(timezone.utc),
                    )
                    .execution_options(synchronize_session=False)
                )
                swapped = result.rowcount == 1
                await session.commit()

            if swapped:
                self._listeners.notify(collection, doc_id, Document(doc_id, merged))
                return True

            logger.warning(
                "version_conflict",
                collection=collection,
                doc_id=doc_id,
                attempt=attempt,
            )

        raise WriteConflict(f"Document {collection}/{doc_id} kept changing; gave up.")

    async def delete(self, collection: str, doc_id: str) -> None:
        async with self._session_factory() as session:
            result = await session.execute(
                delete(StoredDocument)
                .where(StoredDocument.collection == collection, StoredDocument.id == doc_id)
                .execution_options(synchronize_session=False)
            )
            await session.commit()
        if result.rowcount:
            self._listeners.notify(collection, doc_id, None)

    async def query(self, collection: str, filters: Sequence[Filter] = ()) -> list[Document]:
        stmt = select(StoredDocument).where(StoredDocument.collection == collection)
        # JSON array containment differs per dialect; it is checked on the rows.
        row_filters = []
        for f in filters:
            column = StoredDocument.data[f.field].as_string()
            if f.op == "==":
                stmt = stmt.where(column == f.value)
            elif f.op == "in":
                stmt = stmt.where(column.in_(list(f.value)))
            else:
                row_filters.append(f)

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [
                Document(row.id, dict(row.data))
                for row in result.scalars().all()
                if matches_all(row.data, row_filters)
            ]

    async def subscribe(self, collection: str, doc_id: str, listener: Listener) -> Unsubscribe:
        unsubscribe = self._listeners.add(collection, doc_id, listener)
        deliver(listener, await self.get(collection, doc_id))
        return unsubscribe

    async def ping(self) -> None:
        async with self._session_factory() as session:
            await session.execute(text("SELECT 1"))

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("database_pool_closed")
