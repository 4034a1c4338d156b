"""
Tappr — Discovery Engine

Owns the lifecycle of a discovery session, the paired questionnaire an
initiator starts from a target's profile card:

  (none)            --create_session-->            pending_initiator
  pending_initiator --submit_initiator_answers-->  pending_target
  pending_target    --submit_target_answers-->     completed  (scored here)
  pending_*         --sweep, now > expiresAt-->    expired
  completed, expired: terminal

Every transition is written with the store's conditional update guarded on
the current status, so two racing submissions cannot both move a session
forward and a late sweep cannot expire a session that just completed.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Mapping, Optional

import structlog

from tappr.errors import (
    AuthenticationRequired,
    DocumentNotFound,
    InvalidSessionState,
    NotAuthorized,
    SessionExpired,
    SessionNotFound,
)
from tappr.schemas.discovery import (
    PENDING_STATUSES,
    CompatibilityResult,
    DiscoverySession,
    SessionStatus,
    SystemHealth,
)
from tappr.services.compatibility_service import CompatibilityService
from tappr.services.question_bank import QuestionBank
from tappr.store.base import Document, DocumentStore, Filter, Unsubscribe

logger = structlog.get_logger("tappr.discovery_service")

SESSIONS_COLLECTION = "discoverySessions"

SessionListener = Callable[[Optional[DiscoverySession]], None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DiscoveryService:
    """Creates, advances, scores and expires discovery sessions.

    Caller identity is always an explicit argument; ``None`` means the caller
    is not signed in.
    """

    def __init__(
        self,
        store: DocumentStore,
        question_bank: QuestionBank,
        *,
        question_count: int = 5,
        ttl_hours: int = 48,
        clock: Optional[Callable[[], datetime]] = None,
        compatibility_service: Optional[CompatibilityService] = None,
    ) -> None:
        self.store = store
        self.question_bank = question_bank
        self.question_count = question_count
        self.ttl = timedelta(hours=ttl_hours)
        self.clock = clock or utc_now
        self.compatibility_service = compatibility_service or CompatibilityService()

        validation = question_bank.validate()
        if not validation.is_valid:
            logger.error("question_bank_validation_failed", errors=validation.errors)

        logger.info(
            "discovery_service_initialised",
            question_count=question_count,
            ttl_hours=ttl_hours,
            bank_valid=validation.is_valid,
        )

    # ── Session lifecycle ─────────────────────────────────────────────────

    async def create_session(
        self,
        initiator_id: Optional[str],
        target_user_id: str,
        target_user_name: str,
        initiator_name: str = "",
    ) -> DiscoverySession:
        """Start a session with a fresh balanced question set, valid for the TTL."""
        if not initiator_id:
            raise AuthenticationRequired("You must be signed in to start a discovery session.")

        now = self.clock()
        session = DiscoverySession(
            initiator_id=initiator_id,
            initiator_name=initiator_name or "Anonymous",
            target_user_id=target_user_id,
            target_user_name=target_user_name,
            questions=self.question_bank.balanced_random_questions(self.question_count),
            status=SessionStatus.PENDING_INITIATOR,
            created_at=now,
            expires_at=now + self.ttl,
        )
        session.id = await self.store.add(SESSIONS_COLLECTION, session.to_document())

        logger.info(
            "discovery_session_created",
            session_id=session.id,
            initiator_id=initiator_id,
            target_user_id=target_user_id,
            question_ids=[q.id for q in session.questions],
        )
        return session

    async def submit_initiator_answers(
        self,
        session_id: str,
        answers: Mapping[str, str],
        caller_id: Optional[str],
    ) -> DiscoverySession:
        """Record the initiator's answers (replacing any earlier map) and hand over to the target."""
        log = logger.bind(session_id=session_id, caller_id=caller_id)
        session = await self._load_for_write(session_id, caller_id, party="initiator")

        now = self.clock()
        changes = {
            "initiatorAnswers": dict(answers),
            "status": SessionStatus.PENDING_TARGET.value,
            "updatedAt": now.isoformat(),
        }
        await self._transition(session_id, changes, from_status=SessionStatus.PENDING_INITIATOR)

        log.info("initiator_answers_submitted", answer_count=len(answers))
        return session.model_copy(
            update={
                "initiator_answers": dict(answers),
                "status": SessionStatus.PENDING_TARGET,
                "updated_at": now,
            }
        )

    async def submit_target_answers(
        self,
        session_id: str,
        answers: Mapping[str, str],
        caller_id: Optional[str],
    ) -> CompatibilityResult:
        """Record the target's answers, score the session and return the result."""
        log = logger.bind(session_id=session_id, caller_id=caller_id)
        session = await self._load_for_write(session_id, caller_id, party="target")

        if session.status != SessionStatus.PENDING_TARGET:
            raise InvalidSessionState(
                f"Target answers cannot be submitted while the session is {session.status.value}."
            )

        result = self.compatibility_service.calculate_compatibility(
            session.questions, session.initiator_answers, answers
        )

        now = self.clock()
        changes = {
            "targetAnswers": dict(answers),
            "status": SessionStatus.COMPLETED.value,
            "compatibilityScore": result.score,
            "completedAt": now.isoformat(),
            "updatedAt": now.isoformat(),
        }
        await self._transition(session_id, changes, from_status=SessionStatus.PENDING_TARGET)

        log.info("discovery_session_completed", score=result.score)
        return result

    # ── Reads ─────────────────────────────────────────────────────────────

    async def get_session(self, session_id: str) -> Optional[DiscoverySession]:
        document = await self.store.get(SESSIONS_COLLECTION, session_id)
        if document is None:
            return None
        return DiscoverySession.from_document(document.id, document.data)

    async def view_session(self, session_id: str, viewer_id: Optional[str]) -> DiscoverySession:
        """Return the session if ``viewer_id`` may see it.

        Expiry is judged by timestamp, so a session the sweep has not reached
        yet is still reported expired.  Signed-out viewers may only see a
        session awaiting the initiator's answers.
        """
        session = await self.get_session(session_id)
        if session is None:
            raise SessionNotFound()
        if session.is_expired(self.clock()):
            raise SessionExpired()

        if viewer_id is None:
            if session.status != SessionStatus.PENDING_INITIATOR:
                raise NotAuthorized()
        elif not session.is_participant(viewer_id):
            raise NotAuthorized()

        return session

    async def subscribe_to_session(
        self, session_id: str, on_change: SessionListener
    ) -> Unsubscribe:
        """Push the current session now and again after every change.

        ``on_change`` receives None if the session does not exist.  Deliveries
        may repeat a state and may arrive on a store thread.
        """

        def _listener(document: Optional[Document]) -> None:
            if document is None:
                on_change(None)
            else:
                on_change(DiscoverySession.from_document(document.id, document.data))

        unsubscribe = await self.store.subscribe(SESSIONS_COLLECTION, session_id, _listener)
        logger.debug("discovery_session_subscribed", session_id=session_id)
        return unsubscribe

    async def list_pending_for_target(self, user_id: str) -> list[DiscoverySession]:
        """Sessions waiting on ``user_id``'s answers, newest first.

        Sessions past their deadline are left out even before the sweep
        flips them.
        """
        now = self.clock()
        sessions = await self._list(
            Filter("targetUserId", "==", user_id),
            Filter("status", "==", SessionStatus.PENDING_TARGET.value),
        )
        return [s for s in sessions if not s.is_expired(now)]

    async def list_completed_for_initiator(self, user_id: str) -> list[DiscoverySession]:
        """Scored sessions ``user_id`` started, newest first."""
        return await self._list(
            Filter("initiatorId", "==", user_id),
            Filter("status", "==", SessionStatus.COMPLETED.value),
        )

    # ── Maintenance ───────────────────────────────────────────────────────

    async def sweep_expired_sessions(self, now: Optional[datetime] = None) -> int:
        """Flip pending sessions past their expiry to ``expired``.

        Idempotent and safe to run concurrently: each flip is conditional on
        the session still being pending.  Returns how many sessions this call
        expired.
        """
        now = now or self.clock()
        documents = await self.store.query(
            SESSIONS_COLLECTION,
            [Filter("status", "in", [s.value for s in PENDING_STATUSES])],
        )

        expired = 0
        for document in documents:
            session = DiscoverySession.from_document(document.id, document.data)
            if not session.is_expired(now):
                continue
            flipped = await self.store.update_if(
                SESSIONS_COLLECTION,
                session.id,
                {"status": SessionStatus.EXPIRED.value, "updatedAt": now.isoformat()},
                field="status",
                expected=[s.value for s in PENDING_STATUSES],
            )
            if flipped:
                expired += 1

        logger.info("expiry_sweep_complete", scanned=len(documents), expired=expired)
        return expired

    def system_health(self) -> SystemHealth:
        validation = self.question_bank.validate()
        return SystemHealth(question_bank=validation, ready=validation.is_valid)

    # ── Internals ─────────────────────────────────────────────────────────

    async def _load_for_write(
        self, session_id: str, caller_id: Optional[str], *, party: str
    ) -> DiscoverySession:
        if not caller_id:
            raise AuthenticationRequired()

        session = await self.get_session(session_id)
        if session is None:
            raise SessionNotFound()

        owner = session.initiator_id if party == "initiator" else session.target_user_id
        if caller_id != owner:
            raise NotAuthorized(f"Only the session's {party} can submit these answers.")

        if session.is_expired(self.clock()):
            raise SessionExpired()
        return session

    async def _transition(
        self, session_id: str, changes: dict, *, from_status: SessionStatus
    ) -> None:
        try:
            applied = await self.store.update_if(
                SESSIONS_COLLECTION,
                session_id,
                changes,
                field="status",
                expected=[from_status.value],
            )
        except DocumentNotFound:
            raise SessionNotFound()

        if not applied:
            logger.warning(
                "discovery_transition_rejected",
                session_id=session_id,
                expected_status=from_status.value,
                target_status=changes["status"],
            )
            raise InvalidSessionState(
                f"The session is no longer {from_status.value}; it may have been answered already."
            )

    async def _list(self, *filters: Filter) -> list[DiscoverySession]:
        documents = await self.store.query(SESSIONS_COLLECTION, filters)
        sessions = [DiscoverySession.from_document(d.id, d.data) for d in documents]
        return sorted(sessions, key=lambda s: s.created_at, reverse=True)
