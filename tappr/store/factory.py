"""Document store factory."""

import structlog

from tappr.config import Settings

from .base import DocumentStore
from .memory import MemoryDocumentStore

logger = structlog.get_logger("tappr.store.factory")


def create_document_store(settings: Settings) -> DocumentStore:
    """Create the document store selected by ``STORE_BACKEND``.

    Args:
        settings: Application settings

    Returns:
        A ready-to-use DocumentStore

    Raises:
        ValueError: If the selected backend is missing its configuration
    """
    backend = settings.STORE_BACKEND
    logger.info("document_store_selected", backend=backend)

    if backend == "sql":
        from tappr.database import get_engine
        from .sql import SqlDocumentStore

        return SqlDocumentStore(get_engine())

    if backend == "firestore":
        if not (settings.FIREBASE_PROJECT_ID or settings.FIREBASE_CREDENTIALS_PATH):
            raise ValueError(
                "FIREBASE_PROJECT_ID or FIREBASE_CREDENTIALS_PATH must be set when STORE_BACKEND=firestore"
            )

        from .firestore import FirestoreDocumentStore

        return FirestoreDocumentStore(
            project_id=settings.FIREBASE_PROJECT_ID or None,
            credentials_path=settings.FIREBASE_CREDENTIALS_PATH or None,
        )

    return MemoryDocumentStore()
