"""
Tappr — Card lookup API

Opening a card's public page counts as a tap.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from tappr.api.deps import get_card_service
from tappr.errors import CardNotFound
from tappr.schemas.card import CardLookupResponse
from tappr.services.card_service import CardService

router = APIRouter()


@router.get(
    "/{code}",
    response_model=CardLookupResponse,
    summary="Resolve a card code to its owner and count the tap",
)
async def lookup_card(
    code: str,
    service: CardService = Depends(get_card_service),
) -> CardLookupResponse:
    if not await service.record_tap(code):
        raise CardNotFound()
    card = await service.describe(code)
    if card is None:
        raise CardNotFound()
    return card
