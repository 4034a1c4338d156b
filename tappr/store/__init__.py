"""Document store layer."""

from .base import Document, DocumentStore, Filter
from .factory import create_document_store
from .memory import MemoryDocumentStore

__all__ = [
    "Document",
    "DocumentStore",
    "Filter",
    "MemoryDocumentStore",
    "create_document_store",
]
