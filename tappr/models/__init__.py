"""
Tappr — ORM model registry.

Importing every model here ensures that Alembic (and any other tool that
inspects ``Base.metadata``) discovers all tables automatically.
"""

from tappr.models.document import StoredDocument

__all__ = [
    "StoredDocument",
]
