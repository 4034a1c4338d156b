from datetime import datetime
from typing import Optional

from tappr.schemas.base import CamelModel


class CardOwner(CamelModel):
    user_id: str
    username: str
    active: bool = True


class CardLookupResponse(CardOwner):
    code: str
    url: str
    tap_count: int = 0
    last_used: Optional[datetime] = None
