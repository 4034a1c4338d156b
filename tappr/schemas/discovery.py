from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from tappr.schemas.base import CamelModel, DocumentModel
from tappr.schemas.question import BankValidation, CompatibilityQuestion


class SessionStatus(str, Enum):
    PENDING_INITIATOR = "pending_initiator"
    PENDING_TARGET = "pending_target"
    COMPLETED = "completed"
    EXPIRED = "expired"


PENDING_STATUSES = (SessionStatus.PENDING_INITIATOR, SessionStatus.PENDING_TARGET)


class DiscoverySession(DocumentModel):
    initiator_id: str
    initiator_name: str
    target_user_id: str
    target_user_name: str
    questions: list[CompatibilityQuestion]
    initiator_answers: dict[str, str] = Field(default_factory=dict)
    target_answers: dict[str, str] = Field(default_factory=dict)
    status: SessionStatus = SessionStatus.PENDING_INITIATOR
    compatibility_score: Optional[int] = Field(None, ge=0, le=100)
    created_at: datetime
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        """Expiry by timestamp, independent of the stored status."""
        return now > self.expires_at

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.initiator_id, self.target_user_id)


class AnswerMatch(CamelModel):
    question_id: str
    question: str
    initiator_answer: Optional[str] = None
    target_answer: Optional[str] = None
    is_match: bool


class CompatibilityResult(CamelModel):
    score: int = Field(ge=0, le=100)
    matches: list[AnswerMatch]
    insights: list[str]


class CreateSessionRequest(CamelModel):
    target_user_id: str = Field(min_length=1)
    target_user_name: str = Field(min_length=1)
    initiator_name: str = ""


class SubmitAnswersRequest(CamelModel):
    answers: dict[str, str]


class SweepResponse(CamelModel):
    expired_count: int


class SystemHealth(CamelModel):
    question_bank: BankValidation
    ready: bool
