"""
Tappr — Connections & Chats API

Endpoints for filing chat/date requests (directly or from a tapped card),
answering them and listing them, plus the chat rooms accepted requests open
(listing, reading and messaging).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from tappr.api.deps import get_connection_service, require_identity
from tappr.schemas.connection import (
    CardConnectionRequest,
    Chat,
    ChatConnection,
    ChatMessage,
    CreateConnectionRequest,
    SendMessageRequest,
)
from tappr.services.connection_service import ConnectionService

router = APIRouter()
chats_router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# POST / — Request a connection
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "",
    response_model=ChatConnection,
    status_code=status.HTTP_201_CREATED,
    summary="Request a chat or date with a user",
)
async def create_connection(
    body: CreateConnectionRequest,
    caller_id: str = Depends(require_identity),
    service: ConnectionService = Depends(get_connection_service),
) -> ChatConnection:
    return await service.create_connection(
        caller_id,
        to_user_id=body.to_user_id,
        to_user_name=body.to_user_name,
        from_user_name=body.from_user_name,
        type=body.type,
    )


@router.post(
    "/from-card",
    response_model=ChatConnection,
    status_code=status.HTTP_201_CREATED,
    summary="Request a chat or date with the owner of a card",
)
async def create_connection_from_card(
    body: CardConnectionRequest,
    caller_id: str = Depends(require_identity),
    service: ConnectionService = Depends(get_connection_service),
) -> ChatConnection:
    return await service.create_connection_from_card(
        caller_id,
        card_code=body.card_code,
        from_user_name=body.from_user_name,
        type=body.type,
    )


# ──────────────────────────────────────────────────────────────────────────────
# POST /{connection_id}/accept, /decline — Answer a request
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/{connection_id}/accept",
    response_model=Chat,
    summary="Accept a request and open the chat room",
)
async def accept_connection(
    connection_id: str,
    caller_id: str = Depends(require_identity),
    service: ConnectionService = Depends(get_connection_service),
) -> Chat:
    return await service.accept_connection(caller_id, connection_id)


@router.post(
    "/{connection_id}/decline",
    response_model=ChatConnection,
    summary="Decline a request",
)
async def decline_connection(
    connection_id: str,
    caller_id: str = Depends(require_identity),
    service: ConnectionService = Depends(get_connection_service),
) -> ChatConnection:
    return await service.decline_connection(caller_id, connection_id)


# ──────────────────────────────────────────────────────────────────────────────
# GET /received, GET /sent — List requests
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/received",
    response_model=list[ChatConnection],
    summary="Pending requests addressed to the caller",
)
async def list_received(
    caller_id: str = Depends(require_identity),
    service: ConnectionService = Depends(get_connection_service),
) -> list[ChatConnection]:
    return await service.list_received_pending(caller_id)


@router.get(
    "/sent",
    response_model=list[ChatConnection],
    summary="Requests the caller has sent",
)
async def list_sent(
    caller_id: str = Depends(require_identity),
    service: ConnectionService = Depends(get_connection_service),
) -> list[ChatConnection]:
    return await service.list_sent(caller_id)


# ──────────────────────────────────────────────────────────────────────────────
# GET /chats, GET /chats/{chat_id} — Read chat rooms
# ──────────────────────────────────────────────────────────────────────────────

@chats_router.get(
    "",
    response_model=list[Chat],
    summary="Chat rooms the caller takes part in, most recent first",
)
async def list_chats(
    caller_id: str = Depends(require_identity),
    service: ConnectionService = Depends(get_connection_service),
) -> list[Chat]:
    return await service.list_chats(caller_id)


@chats_router.get(
    "/{chat_id}",
    response_model=Chat,
    summary="Get a chat room the caller takes part in",
)
async def get_chat(
    chat_id: str,
    caller_id: str = Depends(require_identity),
    service: ConnectionService = Depends(get_connection_service),
) -> Chat:
    return await service.get_chat(chat_id, caller_id)


# ──────────────────────────────────────────────────────────────────────────────
# /chats/{chat_id}/messages, /chats/{chat_id}/read — Messaging
# ──────────────────────────────────────────────────────────────────────────────

@chats_router.get(
    "/{chat_id}/messages",
    response_model=list[ChatMessage],
    summary="Latest messages in a chat, newest first",
)
async def list_messages(
    chat_id: str,
    limit: int = Query(50, ge=1, le=200),
    caller_id: str = Depends(require_identity),
    service: ConnectionService = Depends(get_connection_service),
) -> list[ChatMessage]:
    return await service.list_messages(chat_id, caller_id, limit=limit)


@chats_router.post(
    "/{chat_id}/messages",
    response_model=ChatMessage,
    status_code=status.HTTP_201_CREATED,
    summary="Send a message",
)
async def send_message(
    chat_id: str,
    body: SendMessageRequest,
    caller_id: str = Depends(require_identity),
    service: ConnectionService = Depends(get_connection_service),
) -> ChatMessage:
    return await service.send_message(chat_id, caller_id, body.text)


@chats_router.post(
    "/{chat_id}/read",
    response_model=Chat,
    summary="Mark the chat read for the caller",
)
async def mark_read(
    chat_id: str,
    caller_id: str = Depends(require_identity),
    service: ConnectionService = Depends(get_connection_service),
) -> Chat:
    return await service.mark_read(chat_id, caller_id)
