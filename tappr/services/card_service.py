"""
Tappr — Card registry lookup.

Physical and NFC cards carry a short code that resolves to the card owner
through the ``cardCodes`` collection.  Issuing cards happens elsewhere; this
service reads the registry, counts taps and builds the public card URL.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from tappr.errors import WriteConflict
from tappr.schemas.card import CardLookupResponse, CardOwner
from tappr.store.base import Document, DocumentStore, Filter

logger = structlog.get_logger("tappr.card_service")

CARD_CODES_COLLECTION = "cardCodes"

# Guarded increments retried before giving up with WriteConflict
_MAX_TAP_ATTEMPTS = 5


class CardService:
    def __init__(
        self,
        store: DocumentStore,
        base_url: str = "https://tappr.uk/c",
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.store = store
        self.base_url = base_url.rstrip("/")
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    async def lookup(self, code: str) -> Optional[CardOwner]:
        """Resolve ``code`` to its owner, or None for an unknown code.

        Inactive cards still resolve; callers decide whether to honour them.
        """
        document = await self._find(code)
        if document is None:
            return None

        data = document.data
        return CardOwner(
            user_id=data["userId"],
            username=data.get("username", ""),
            active=data.get("active", True),
        )

    async def describe(self, code: str) -> Optional[CardLookupResponse]:
        document = await self._find(code)
        if document is None:
            return None

        data = document.data
        return CardLookupResponse(
            user_id=data["userId"],
            username=data.get("username", ""),
            active=data.get("active", True),
            code=code,
            url=self.card_url(code),
            tap_count=data.get("tapCount", 0),
            last_used=data.get("lastUsed"),
        )

    async def record_tap(self, code: str) -> bool:
        """Count one tap of ``code`` and stamp ``lastUsed``.

        Returns False for an unknown code.  The increment is a conditional
        write on the previous count, so concurrent taps are never lost.
        """
        for attempt in range(1, _MAX_TAP_ATTEMPTS + 1):
            document = await self._find(code)
            if document is None:
                return False

            previous = document.data.get("tapCount")
            applied = await self.store.update_if(
                CARD_CODES_COLLECTION,
                document.id,
                {"tapCount": (previous or 0) + 1, "lastUsed": self.clock().isoformat()},
                field="tapCount",
                expected=[previous],
            )
            if applied:
                logger.info("card_tapped", code=code, tap_count=(previous or 0) + 1)
                return True

            logger.warning("card_tap_conflict", code=code, attempt=attempt)

        raise WriteConflict(f"Card {code} kept changing; tap not recorded.")

    def card_url(self, code: str) -> str:
        return f"{self.base_url}/{code}"

    async def _find(self, code: str) -> Optional[Document]:
        documents = await self.store.query(CARD_CODES_COLLECTION, [Filter("code", "==", code)])
        if not documents:
            logger.info("card_lookup_miss", code=code)
            return None

        if len(documents) > 1:
            logger.warning("card_code_not_unique", code=code, matches=len(documents))
        return documents[0]
