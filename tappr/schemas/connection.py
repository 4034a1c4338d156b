from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from tappr.schemas.base import CamelModel, DocumentModel


class ConnectionType(str, Enum):
    CHAT = "chat"
    DATE = "date"


class ConnectionStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class ChatConnection(DocumentModel):
    from_user_id: str
    from_user_name: str
    to_user_id: str
    to_user_name: str
    type: ConnectionType = ConnectionType.CHAT
    card_code: Optional[str] = None
    status: ConnectionStatus = ConnectionStatus.PENDING
    created_at: datetime
    accepted_at: Optional[datetime] = None
    declined_at: Optional[datetime] = None
    chat_id: Optional[str] = None


class Chat(DocumentModel):
    participants: list[str]
    participant_names: dict[str, str]
    participant_avatars: dict[str, str] = Field(default_factory=dict)
    last_message: str = ""
    last_message_time: datetime
    last_message_sender_id: str = ""
    unread_count: dict[str, int] = Field(default_factory=dict)
    created_at: datetime


class CreateConnectionRequest(CamelModel):
    to_user_id: str = Field(min_length=1)
    to_user_name: str = Field(min_length=1)
    from_user_name: str = "Anonymous"
    type: ConnectionType = ConnectionType.CHAT


class CardConnectionRequest(CamelModel):
    card_code: str = Field(min_length=1)
    from_user_name: str = "Anonymous"
    type: ConnectionType = ConnectionType.CHAT


class ChatMessage(DocumentModel):
    text: str
    sender_id: str
    sender_name: str
    timestamp: datetime
    read: bool = False


class SendMessageRequest(CamelModel):
    text: str = Field(min_length=1, max_length=2000)
