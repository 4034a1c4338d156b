"""
Tappr — Connection requests and chat rooms.

A visitor who taps a card chooses "chat" or "date", which files a pending
connection request with the card owner.  The owner accepts (opening a chat
room shared by both) or declines.  Answering is a guarded status flip, so a
request is answered once and accepting twice cannot open two rooms.  Inside
a room, participants post messages and keep per-user unread counts.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from tappr.errors import (
    AuthenticationRequired,
    CardInactive,
    CardNotFound,
    ChatNotFound,
    ConnectionNotFound,
    DocumentNotFound,
    InvalidConnectionState,
    NotAuthorized,
    WriteConflict,
)
from tappr.schemas.connection import (
    Chat,
    ChatConnection,
    ChatMessage,
    ConnectionStatus,
    ConnectionType,
)
from tappr.services.card_service import CardService
from tappr.store.base import DocumentStore, Filter

logger = structlog.get_logger("tappr.connection_service")

CONNECTIONS_COLLECTION = "chatConnections"
CHATS_COLLECTION = "chats"

# Guarded chat writes retried before giving up with WriteConflict
_MAX_CHAT_WRITE_ATTEMPTS = 5


def messages_collection(chat_id: str) -> str:
    return f"{CHATS_COLLECTION}/{chat_id}/messages"


class ConnectionService:
    """Files, answers and lists connection requests; opens chat rooms."""

    def __init__(
        self,
        store: DocumentStore,
        card_service: CardService,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.store = store
        self.card_service = card_service
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    # ── Requests ──────────────────────────────────────────────────────────

    async def create_connection(
        self,
        caller_id: Optional[str],
        to_user_id: str,
        to_user_name: str,
        from_user_name: str = "Anonymous",
        type: ConnectionType = ConnectionType.CHAT,
        card_code: Optional[str] = None,
    ) -> ChatConnection:
        if not caller_id:
            raise AuthenticationRequired("You must be signed in to connect.")

        connection = ChatConnection(
            from_user_id=caller_id,
            from_user_name=from_user_name or "Anonymous",
            to_user_id=to_user_id,
            to_user_name=to_user_name,
            type=type,
            card_code=card_code,
            status=ConnectionStatus.PENDING,
            created_at=self.clock(),
        )
        connection.id = await self.store.add(CONNECTIONS_COLLECTION, connection.to_document())

        logger.info(
            "connection_requested",
            connection_id=connection.id,
            from_user_id=caller_id,
            to_user_id=to_user_id,
            type=connection.type.value,
            card_code=card_code,
        )
        return connection

    async def create_connection_from_card(
        self,
        caller_id: Optional[str],
        card_code: str,
        from_user_name: str = "Anonymous",
        type: ConnectionType = ConnectionType.CHAT,
    ) -> ChatConnection:
        """File a request with whoever owns ``card_code``."""
        if not caller_id:
            raise AuthenticationRequired("You must be signed in to connect.")

        owner = await self.card_service.lookup(card_code)
        if owner is None:
            raise CardNotFound()
        if not owner.active:
            raise CardInactive()

        return await self.create_connection(
            caller_id,
            to_user_id=owner.user_id,
            to_user_name=owner.username,
            from_user_name=from_user_name,
            type=type,
            card_code=card_code,
        )

    # ── Answers ───────────────────────────────────────────────────────────

    async def accept_connection(self, caller_id: Optional[str], connection_id: str) -> Chat:
        """Accept a pending request addressed to the caller and open the chat room.

        The room is created first and the request flips to accepted together
        with its ``chatId`` in one guarded write.  If that write fails or loses
        to a concurrent answer, the room is removed again and the request is
        left as it was.
        """
        log = logger.bind(connection_id=connection_id, caller_id=caller_id)
        connection = await self._load_for_recipient(caller_id, connection_id)

        now = self.clock()
        chat = Chat(
            participants=[connection.from_user_id, connection.to_user_id],
            participant_names={
                connection.from_user_id: connection.from_user_name,
                connection.to_user_id: connection.to_user_name,
            },
            participant_avatars={},
            last_message="",
            last_message_time=now,
            last_message_sender_id="",
            unread_count={connection.from_user_id: 0, connection.to_user_id: 0},
            created_at=now,
        )
        chat.id = await self.store.add(CHATS_COLLECTION, chat.to_document())

        try:
            await self._answer(
                connection,
                {
                    "status": ConnectionStatus.ACCEPTED.value,
                    "acceptedAt": now.isoformat(),
                    "chatId": chat.id,
                },
            )
        except Exception:
            await self.store.delete(CHATS_COLLECTION, chat.id)
            log.warning("orphan_chat_removed", chat_id=chat.id)
            raise

        log.info("connection_accepted", chat_id=chat.id)
        return chat

    async def decline_connection(self, caller_id: Optional[str], connection_id: str) -> ChatConnection:
        connection = await self._load_for_recipient(caller_id, connection_id)

        now = self.clock()
        await self._answer(
            connection,
            {"status": ConnectionStatus.DECLINED.value, "declinedAt": now.isoformat()},
        )

        logger.info("connection_declined", connection_id=connection_id, caller_id=caller_id)
        return connection.model_copy(
            update={"status": ConnectionStatus.DECLINED, "declined_at": now}
        )

    # ── Reads ─────────────────────────────────────────────────────────────

    async def get_connection(self, connection_id: str) -> Optional[ChatConnection]:
        document = await self.store.get(CONNECTIONS_COLLECTION, connection_id)
        if document is None:
            return None
        return ChatConnection.from_document(document.id, document.data)

    async def list_received_pending(self, caller_id: Optional[str]) -> list[ChatConnection]:
        """Requests awaiting the caller's answer, newest first."""
        if not caller_id:
            raise AuthenticationRequired()
        return await self._list(
            Filter("toUserId", "==", caller_id),
            Filter("status", "==", ConnectionStatus.PENDING.value),
        )

    async def list_sent(self, caller_id: Optional[str]) -> list[ChatConnection]:
        """Every request the caller has filed, newest first."""
        if not caller_id:
            raise AuthenticationRequired()
        return await self._list(Filter("fromUserId", "==", caller_id))

    async def get_chat(self, chat_id: str, caller_id: Optional[str]) -> Chat:
        if not caller_id:
            raise AuthenticationRequired()

        document = await self.store.get(CHATS_COLLECTION, chat_id)
        if document is None:
            raise ChatNotFound()

        chat = Chat.from_document(document.id, document.data)
        if caller_id not in chat.participants:
            raise NotAuthorized()
        return chat

    # ── Chats ─────────────────────────────────────────────────────────────

    async def list_chats(self, caller_id: Optional[str]) -> list[Chat]:
        """Chat rooms the caller takes part in, most recent message first."""
        if not caller_id:
            raise AuthenticationRequired()

        documents = await self.store.query(
            CHATS_COLLECTION, [Filter("participants", "array-contains", caller_id)]
        )
        chats = [Chat.from_document(d.id, d.data) for d in documents]
        return sorted(chats, key=lambda c: c.last_message_time, reverse=True)

    async def send_message(self, chat_id: str, caller_id: Optional[str], text: str) -> ChatMessage:
        """Post ``text`` to a chat and bump every other participant's unread count."""
        chat = await self.get_chat(chat_id, caller_id)

        now = self.clock()
        message = ChatMessage(
            text=text,
            sender_id=caller_id,
            sender_name=chat.participant_names.get(caller_id) or "Anonymous",
            timestamp=now,
        )
        message.id = await self.store.add(messages_collection(chat_id), message.to_document())

        def _after_send(current: Chat) -> dict:
            unread = dict(current.unread_count)
            for participant in current.participants:
                if participant != caller_id:
                    unread[participant] = unread.get(participant, 0) + 1
            return {
                "lastMessage": text,
                "lastMessageTime": now.isoformat(),
                "lastMessageSenderId": caller_id,
                "unreadCount": unread,
            }

        await self._update_chat(chat_id, _after_send)
        logger.info("chat_message_sent", chat_id=chat_id, message_id=message.id, sender_id=caller_id)
        return message

    async def list_messages(
        self, chat_id: str, caller_id: Optional[str], limit: int = 50
    ) -> list[ChatMessage]:
        """The latest ``limit`` messages of a chat, newest first."""
        await self.get_chat(chat_id, caller_id)

        documents = await self.store.query(messages_collection(chat_id))
        messages = [ChatMessage.from_document(d.id, d.data) for d in documents]
        messages.sort(key=lambda m: m.timestamp, reverse=True)
        return messages[:limit]

    async def mark_read(self, chat_id: str, caller_id: Optional[str]) -> Chat:
        """Clear the caller's unread count and flag messages sent to them as read."""
        await self.get_chat(chat_id, caller_id)

        collection = messages_collection(chat_id)
        for document in await self.store.query(collection):
            if document.data.get("senderId") != caller_id and not document.data.get("read"):
                await self.store.update(collection, document.id, {"read": True})

        chat = await self._update_chat(
            chat_id, lambda current: {"unreadCount": {**current.unread_count, caller_id: 0}}
        )
        logger.info("chat_marked_read", chat_id=chat_id, caller_id=caller_id)
        return chat

    # ── Internals ─────────────────────────────────────────────────────────

    async def _load_for_recipient(
        self, caller_id: Optional[str], connection_id: str
    ) -> ChatConnection:
        if not caller_id:
            raise AuthenticationRequired()

        connection = await self.get_connection(connection_id)
        if connection is None:
            raise ConnectionNotFound()
        if connection.to_user_id != caller_id:
            raise NotAuthorized("Only the recipient can answer this request.")
        if connection.status != ConnectionStatus.PENDING:
            raise InvalidConnectionState()
        return connection

    async def _answer(self, connection: ChatConnection, changes: dict) -> None:
        try:
            applied = await self.store.update_if(
                CONNECTIONS_COLLECTION,
                connection.id,
                changes,
                field="status",
                expected=[ConnectionStatus.PENDING.value],
            )
        except DocumentNotFound:
            raise ConnectionNotFound()

        if not applied:
            logger.warning("connection_answer_rejected", connection_id=connection.id)
            raise InvalidConnectionState()

    async def _update_chat(self, chat_id: str, build: Callable[[Chat], dict]) -> Chat:
        """Apply ``build(current)`` guarded on the unread counts it was built from."""
        for attempt in range(1, _MAX_CHAT_WRITE_ATTEMPTS + 1):
            document = await self.store.get(CHATS_COLLECTION, chat_id)
            if document is None:
                raise ChatNotFound()

            changes = build(Chat.from_document(document.id, document.data))
            try:
                applied = await self.store.update_if(
                    CHATS_COLLECTION,
                    chat_id,
                    changes,
                    field="unreadCount",
                    expected=[document.data.get("unreadCount")],
                )
            except DocumentNotFound:
                raise ChatNotFound()

            if applied:
                return Chat.from_document(chat_id, {**document.data, **changes})
            logger.warning("chat_write_conflict", chat_id=chat_id, attempt=attempt)

        raise WriteConflict(f"Chat {chat_id} kept changing; gave up.")

    async def _list(self, *filters: Filter) -> list[ChatConnection]:
        documents = await self.store.query(CONNECTIONS_COLLECTION, filters)
        connections = [ChatConnection.from_document(d.id, d.data) for d in documents]
        return sorted(connections, key=lambda c: c.created_at, reverse=True)
