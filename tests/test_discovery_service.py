"""Unit tests for DiscoveryService — session lifecycle, authorization and expiry."""
import asyncio

import pytest

from conftest import (
    INITIATOR_ID,
    STRANGER_ID,
    TARGET_ID,
    InterleavingStore,
    answers_for,
    first_options,
)
from tappr.errors import (
    AuthenticationRequired,
    InvalidSessionState,
    NotAuthorized,
    SessionExpired,
    SessionNotFound,
)
from tappr.schemas.discovery import CompatibilityResult, SessionStatus
from tappr.services.discovery_service import SESSIONS_COLLECTION, DiscoveryService


async def _create(discovery_service):
    return await discovery_service.create_session(
        INITIATOR_ID, TARGET_ID, "Taylor", initiator_name="Jordan"
    )


async def _answered_by_initiator(discovery_service):
    session = await _create(discovery_service)
    await discovery_service.submit_initiator_answers(
        session.id, first_options(session), INITIATOR_ID
    )
    return session


class TestCreateSession:
    """Tests for starting a session."""

    async def test_new_session_shape(self, discovery_service, clock):
        session = await _create(discovery_service)
        assert session.id
        assert session.status == SessionStatus.PENDING_INITIATOR
        assert len(session.questions) == 5
        assert len({q.id for q in session.questions}) == 5
        assert session.initiator_answers == {}
        assert session.target_answers == {}
        assert session.compatibility_score is None
        assert session.created_at == clock.now
        assert (session.expires_at - session.created_at).total_seconds() == 48 * 3600

    async def test_persisted_with_camel_case_keys(self, discovery_service, store):
        session = await _create(discovery_service)
        document = await store.get(SESSIONS_COLLECTION, session.id)
        assert document.data["initiatorId"] == INITIATOR_ID
        assert document.data["targetUserId"] == TARGET_ID
        assert document.data["targetUserName"] == "Taylor"
        assert document.data["status"] == "pending_initiator"
        assert set(document.data["questions"][0]) == {"id", "question", "category", "options", "emoji"}
        assert "compatibilityScore" not in document.data

    async def test_requires_identity(self, discovery_service):
        with pytest.raises(AuthenticationRequired):
            await discovery_service.create_session(None, TARGET_ID, "Taylor")

    async def test_questions_are_a_snapshot(self, discovery_service, question_bank):
        session = await _create(discovery_service)
        stored = await discovery_service.get_session(session.id)
        assert [q.id for q in stored.questions] == [q.id for q in session.questions]
        # Later sampling from the bank does not touch the stored set.
        question_bank.balanced_random_questions(5)
        again = await discovery_service.get_session(session.id)
        assert [q.id for q in again.questions] == [q.id for q in session.questions]


class TestStateTransitions:
    """Tests for the happy path and out-of-order submissions."""

    async def test_full_lifecycle(self, discovery_service, clock):
        session = await _create(discovery_service)

        clock.advance(minutes=5)
        updated = await discovery_service.submit_initiator_answers(
            session.id, first_options(session), INITIATOR_ID
        )
        assert updated.status == SessionStatus.PENDING_TARGET
        stored = await discovery_service.get_session(session.id)
        assert stored.status == SessionStatus.PENDING_TARGET
        assert stored.initiator_answers == first_options(session)

        clock.advance(hours=3)
        result = await discovery_service.submit_target_answers(
            session.id, first_options(session), TARGET_ID
        )
        assert result.score == 100

        completed = await discovery_service.get_session(session.id)
        assert completed.status == SessionStatus.COMPLETED
        assert completed.compatibility_score == 100
        assert completed.completed_at is not None
        assert completed.completed_at >= completed.created_at
        assert completed.target_answers == first_options(session)

    async def test_initiator_answers_replace_wholesale(self, discovery_service, store):
        session = await _create(discovery_service)
        partial = answers_for(session, session.questions[0].options[1])
        await discovery_service.submit_initiator_answers(session.id, partial, INITIATOR_ID)
        document = await store.get(SESSIONS_COLLECTION, session.id)
        assert document.data["initiatorAnswers"] == partial

    async def test_target_before_initiator_rejected(self, discovery_service):
        session = await _create(discovery_service)
        with pytest.raises(InvalidSessionState):
            await discovery_service.submit_target_answers(session.id, {}, TARGET_ID)

    async def test_second_target_submission_rejected(self, discovery_service):
        session = await _answered_by_initiator(discovery_service)
        await discovery_service.submit_target_answers(session.id, first_options(session), TARGET_ID)
        with pytest.raises(InvalidSessionState):
            await discovery_service.submit_target_answers(session.id, {}, TARGET_ID)
        stored = await discovery_service.get_session(session.id)
        assert stored.compatibility_score == 100

    async def test_initiator_cannot_resubmit_after_handover(self, discovery_service):
        session = await _answered_by_initiator(discovery_service)
        with pytest.raises(InvalidSessionState):
            await discovery_service.submit_initiator_answers(session.id, {}, INITIATOR_ID)

    async def test_concurrent_target_submissions_score_once(self, question_bank, clock):
        store = InterleavingStore()
        service = DiscoveryService(store, question_bank, clock=clock)
        session = await _answered_by_initiator(service)
        store.update_if_results.clear()

        outcomes = await asyncio.gather(
            service.submit_target_answers(session.id, first_options(session), TARGET_ID),
            service.submit_target_answers(session.id, {}, TARGET_ID),
            return_exceptions=True,
        )

        # Both read pending_target; only the guarded write decides the winner.
        assert store.update_if_results == [True, False]
        assert isinstance(outcomes[0], CompatibilityResult)
        assert isinstance(outcomes[1], InvalidSessionState)

        stored = await service.get_session(session.id)
        assert stored.status == SessionStatus.COMPLETED
        assert stored.compatibility_score == outcomes[0].score == 100
        assert stored.target_answers == first_options(session)

    async def test_unknown_session(self, discovery_service):
        with pytest.raises(SessionNotFound):
            await discovery_service.submit_initiator_answers("missing", {}, INITIATOR_ID)
        assert await discovery_service.get_session("missing") is None


class TestWriteAuthorization:
    """Only each party may submit their own answers."""

    async def test_target_cannot_submit_initiator_answers(self, discovery_service):
        session = await _create(discovery_service)
        with pytest.raises(NotAuthorized):
            await discovery_service.submit_initiator_answers(session.id, {}, TARGET_ID)

    async def test_initiator_cannot_submit_target_answers(self, discovery_service):
        session = await _answered_by_initiator(discovery_service)
        with pytest.raises(NotAuthorized):
            await discovery_service.submit_target_answers(session.id, {}, INITIATOR_ID)

    async def test_signed_out_submission(self, discovery_service):
        session = await _create(discovery_service)
        with pytest.raises(AuthenticationRequired):
            await discovery_service.submit_initiator_answers(session.id, {}, None)

    async def test_expired_session_rejects_answers(self, discovery_service, clock):
        session = await _answered_by_initiator(discovery_service)
        clock.advance(hours=49)
        with pytest.raises(SessionExpired):
            await discovery_service.submit_target_answers(session.id, {}, TARGET_ID)


class TestViewAuthorization:
    """Tests for who may read a session."""

    async def test_signed_out_viewer_while_pending_initiator(self, discovery_service):
        session = await _create(discovery_service)
        viewed = await discovery_service.view_session(session.id, None)
        assert viewed.id == session.id

    async def test_signed_out_viewer_after_handover(self, discovery_service):
        session = await _answered_by_initiator(discovery_service)
        with pytest.raises(NotAuthorized):
            await discovery_service.view_session(session.id, None)

    async def test_stranger_rejected(self, discovery_service):
        session = await _create(discovery_service)
        with pytest.raises(NotAuthorized):
            await discovery_service.view_session(session.id, STRANGER_ID)

    async def test_both_parties_allowed(self, discovery_service):
        session = await _answered_by_initiator(discovery_service)
        assert (await discovery_service.view_session(session.id, INITIATOR_ID)).id == session.id
        assert (await discovery_service.view_session(session.id, TARGET_ID)).id == session.id

    async def test_expired_by_timestamp_before_sweep(self, discovery_service, clock):
        session = await _create(discovery_service)
        clock.advance(hours=48, seconds=1)
        with pytest.raises(SessionExpired):
            await discovery_service.view_session(session.id, INITIATOR_ID)

    async def test_unknown_session(self, discovery_service):
        with pytest.raises(SessionNotFound):
            await discovery_service.view_session("missing", INITIATOR_ID)


class TestExpirySweep:
    """Tests for flipping stale pending sessions to expired."""

    async def test_expires_pending_target(self, discovery_service, clock):
        session = await _answered_by_initiator(discovery_service)
        clock.advance(hours=49)

        assert await discovery_service.sweep_expired_sessions() == 1
        assert (await discovery_service.get_session(session.id)).status == SessionStatus.EXPIRED

        # Second pass is a no-op.
        assert await discovery_service.sweep_expired_sessions() == 0
        assert (await discovery_service.get_session(session.id)).status == SessionStatus.EXPIRED

    async def test_leaves_fresh_and_completed_sessions(self, discovery_service, clock):
        fresh = await _create(discovery_service)
        done = await _answered_by_initiator(discovery_service)
        await discovery_service.submit_target_answers(done.id, first_options(done), TARGET_ID)

        clock.advance(hours=1)
        assert await discovery_service.sweep_expired_sessions() == 0

        clock.advance(hours=48)
        assert await discovery_service.sweep_expired_sessions() == 1
        assert (await discovery_service.get_session(fresh.id)).status == SessionStatus.EXPIRED
        assert (await discovery_service.get_session(done.id)).status == SessionStatus.COMPLETED

    async def test_explicit_now(self, discovery_service, clock):
        session = await _create(discovery_service)
        assert await discovery_service.sweep_expired_sessions(now=session.expires_at) == 0
        later = clock.advance(hours=50)
        assert await discovery_service.sweep_expired_sessions(now=later) == 1


class TestSubscriptions:
    """Tests for live session updates."""

    async def test_immediate_then_on_change(self, discovery_service, store):
        session = await _create(discovery_service)
        seen = []

        unsubscribe = await discovery_service.subscribe_to_session(session.id, seen.append)
        assert [s.status for s in seen] == [SessionStatus.PENDING_INITIATOR]

        await discovery_service.submit_initiator_answers(session.id, first_options(session), INITIATOR_ID)
        await discovery_service.submit_target_answers(session.id, first_options(session), TARGET_ID)
        assert [s.status for s in seen] == [
            SessionStatus.PENDING_INITIATOR,
            SessionStatus.PENDING_TARGET,
            SessionStatus.COMPLETED,
        ]
        assert seen[-1].compatibility_score == 100

        unsubscribe()
        assert store.listener_count(SESSIONS_COLLECTION, session.id) == 0

    async def test_missing_session_delivers_none(self, discovery_service):
        seen = []
        unsubscribe = await discovery_service.subscribe_to_session("missing", seen.append)
        assert seen == [None]
        unsubscribe()

    async def test_no_deliveries_after_unsubscribe(self, discovery_service):
        session = await _create(discovery_service)
        seen = []
        unsubscribe = await discovery_service.subscribe_to_session(session.id, seen.append)
        unsubscribe()
        await discovery_service.submit_initiator_answers(session.id, {}, INITIATOR_ID)
        assert len(seen) == 1


class TestListsAndHealth:
    """Tests for per-user session lists and the health summary."""

    async def test_pending_for_target(self, discovery_service, clock):
        older = await _answered_by_initiator(discovery_service)
        clock.advance(minutes=1)
        newer = await _answered_by_initiator(discovery_service)
        await _create(discovery_service)  # still with the initiator

        pending = await discovery_service.list_pending_for_target(TARGET_ID)
        assert [s.id for s in pending] == [newer.id, older.id]
        assert await discovery_service.list_pending_for_target(STRANGER_ID) == []

    async def test_pending_skips_overdue_sessions(self, discovery_service, clock):
        await _answered_by_initiator(discovery_service)
        clock.advance(hours=49)
        assert await discovery_service.list_pending_for_target(TARGET_ID) == []

    async def test_completed_for_initiator(self, discovery_service):
        session = await _answered_by_initiator(discovery_service)
        assert await discovery_service.list_completed_for_initiator(INITIATOR_ID) == []
        await discovery_service.submit_target_answers(session.id, {}, TARGET_ID)
        completed = await discovery_service.list_completed_for_initiator(INITIATOR_ID)
        assert [s.id for s in completed] == [session.id]
        assert completed[0].compatibility_score == 0

    def test_system_health(self, discovery_service):
        health = discovery_service.system_health()
        assert health.ready is True
        assert health.question_bank.is_valid is True
