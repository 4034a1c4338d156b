"""
Firestore document store.

Reads and writes go through ``google.cloud.firestore.AsyncClient``; live
subscriptions use the firebase-admin (sync) client because ``on_snapshot``
is only available there.  Both clients share the same credentials and
project id.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, Sequence, Union

import firebase_admin
import structlog
from firebase_admin import credentials, firestore
from google.api_core.exceptions import NotFound
from google.cloud.firestore import AsyncClient, async_transactional
from google.cloud.firestore_v1.base_query import FieldFilter
from google.oauth2 import service_account

from tappr.errors import DocumentNotFound

from .base import Document, DocumentStore, Filter, Listener, Unsubscribe
from .listeners import deliver

logger = structlog.get_logger("tappr.store.firestore")


def _project_id_from_credentials_file(credentials_path: Union[Path, str]) -> Optional[str]:
    """Read project_id from a Google service account JSON file if present."""
    path = Path(credentials_path)
    if not path.is_file():
        return None
    with open(path) as f:
        data = json.load(f)
    return data.get("project_id") or data.get("projectId")


class FirestoreDocumentStore(DocumentStore):
    """Document store backed by Cloud Firestore collections."""

    def __init__(
        self,
        project_id: Optional[str] = None,
        credentials_path: Optional[Union[Path, str]] = None,
    ):
        resolved = str(Path(credentials_path).resolve()) if credentials_path else None
        try:
            firebase_admin.get_app()
        except ValueError:
            opts = {"projectId": project_id} if project_id else None
            if resolved:
                firebase_admin.initialize_app(credentials.Certificate(resolved), opts)
            else:
                firebase_admin.initialize_app(options=opts)
        self._db = firestore.client()

        if resolved:
            creds = service_account.Credentials.from_service_account_file(resolved)
            project = project_id or _project_id_from_credentials_file(resolved)
            self._async_db = AsyncClient(project=project, credentials=creds)
        else:
            self._async_db = AsyncClient(project=project_id or None)

        logger.info("firestore_store_initialised", project_id=project_id, has_credentials=bool(resolved))

    def _ref(self, collection: str, doc_id: str):
        return self._async_db.collection(collection).document(doc_id)

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        _, ref = await self._async_db.collection(collection).add(data)
        return ref.id

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        snapshot = await self._ref(collection, doc_id).get()
        if not snapshot.exists:
            return None
        return Document(snapshot.id, snapshot.to_dict() or {})

    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        await self._ref(collection, doc_id).set(data)

    async def update(self, collection: str, doc_id: str, changes: dict[str, Any]) -> None:
        try:
            await self._ref(collection, doc_id).update(changes)
        except NotFound:
            raise DocumentNotFound(collection, doc_id)

    async def update_if(
        self,
        collection: str,
        doc_id: str,
        changes: dict[str, Any],
        *,
        field: str,
        expected: Sequence[Any],
    ) -> bool:
        ref = self._ref(collection, doc_id)

        @async_transactional
        async def _apply(transaction) -> bool:
            snapshot = await ref.get(transaction=transaction)
            if not snapshot.exists:
                raise DocumentNotFound(collection, doc_id)
            if (snapshot.to_dict() or {}).get(field) not in expected:
                return False
            transaction.update(ref, changes)
            return True

        return await _apply(self._async_db.transaction())

    async def delete(self, collection: str, doc_id: str) -> None:
        await self._ref(collection, doc_id).delete()

    async def query(self, collection: str, filters: Sequence[Filter] = ()) -> list[Document]:
        query = self._async_db.collection(collection)
        for f in filters:
            value = list(f.value) if f.op == "in" else f.value
            query = query.where(filter=FieldFilter(f.field, f.op, value))
        return [
            Document(snapshot.id, snapshot.to_dict() or {})
            async for snapshot in query.stream()
        ]

    async def subscribe(self, collection: str, doc_id: str, listener: Listener) -> Unsubscribe:
        def _on_snapshot(snapshots, changes, read_time) -> None:
            snapshot = snapshots[0] if snapshots else None
            if snapshot is None or not snapshot.exists:
                deliver(listener, None)
            else:
                deliver(listener, Document(snapshot.id, snapshot.to_dict() or {}))

        # The watch delivers the current state first, then every change.
        watch = self._db.collection(collection).document(doc_id).on_snapshot(_on_snapshot)
        return watch.unsubscribe

    async def ping(self) -> None:
        await self._ref("_health", "ping").get()
