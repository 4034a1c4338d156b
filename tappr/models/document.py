"""
Tappr — Stored document model for the SQL document store.

Every collection (``discoverySessions``, ``chatConnections``, ``chats``,
``chats/{chatId}/messages``, ``cardCodes``) shares one table keyed by
``(collection, id)``.  The payload
lives in a JSON column; ``version`` increments on every write and guards
conditional updates.
"""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from tappr.database import Base


class StoredDocument(Base):
    __tablename__ = "documents"

    collection: Mapped[str] = mapped_column(String(128), primary_key=True)
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    data: Mapped[dict] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), nullable=False
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return f"<StoredDocument {self.collection}/{self.id} v{self.version}>"
