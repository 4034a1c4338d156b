"""API tests through FastAPI's TestClient with an in-memory store."""
import asyncio
import json
import random
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from conftest import INITIATOR_ID, STRANGER_ID, TARGET_ID
from tappr.api.discovery import session_events
from tappr.config import Settings
from tappr.main import create_app
from tappr.schemas.discovery import DiscoverySession, SessionStatus
from tappr.services.card_service import CARD_CODES_COLLECTION
from tappr.services.discovery_service import SESSIONS_COLLECTION
from tappr.services.question_bank import QuestionBank
from tappr.store.memory import MemoryDocumentStore

INITIATOR = {"X-User-Id": INITIATOR_ID}
TARGET = {"X-User-Id": TARGET_ID}
STRANGER = {"X-User-Id": STRANGER_ID}


async def _seed(store):
    await store.add(
        CARD_CODES_COLLECTION,
        {"code": "ABC123", "userId": TARGET_ID, "username": "taylor", "active": True},
    )
    await store.add(
        CARD_CODES_COLLECTION,
        {"code": "GONE99", "userId": TARGET_ID, "username": "taylor", "active": False},
    )

    created = datetime.now(timezone.utc) - timedelta(days=3)
    stale = DiscoverySession(
        initiator_id=INITIATOR_ID,
        initiator_name="Jordan",
        target_user_id=TARGET_ID,
        target_user_name="Taylor",
        questions=QuestionBank().all_questions()[:5],
        status=SessionStatus.PENDING_TARGET,
        created_at=created,
        expires_at=created + timedelta(hours=48),
    )
    await store.set(SESSIONS_COLLECTION, "stale-session", stale.to_document())


@pytest.fixture
def client():
    store = MemoryDocumentStore()
    asyncio.run(_seed(store))
    settings = Settings(EXPIRY_SWEEP_INTERVAL_SECONDS=0, STORE_BACKEND="memory")
    app = create_app(settings, store=store, question_bank=QuestionBank(rng=random.Random(8)))
    with TestClient(app) as test_client:
        yield test_client


def _start_session(client):
    response = client.post(
        "/api/v1/discovery/sessions",
        json={"targetUserId": TARGET_ID, "targetUserName": "Taylor", "initiatorName": "Jordan"},
        headers=INITIATOR,
    )
    assert response.status_code == 201
    return response.json()


def _same_answers(session):
    return {q["id"]: q["options"][0] for q in session["questions"]}


class TestHealth:
    """Tests for liveness and readiness probes."""

    def test_liveness(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_deep(self, client):
        body = client.get("/health/deep").json()
        assert body == {"status": "healthy", "store": "connected", "questionBank": "valid"}


class TestQuestionsApi:
    """Tests for the question bank endpoints."""

    def test_list_all(self, client):
        response = client.get("/api/v1/questions")
        assert response.status_code == 200
        assert len(response.json()) == 100

    def test_filter_by_category(self, client):
        body = client.get("/api/v1/questions", params={"category": "goals"}).json()
        assert len(body) == 10
        assert {q["category"] for q in body} == {"goals"}

    def test_unknown_category(self, client):
        assert client.get("/api/v1/questions", params={"category": "astrology"}).status_code == 422

    def test_stats(self, client):
        body = client.get("/api/v1/questions/stats").json()
        assert body["total"] == 100
        assert body["categories"]["lifestyle"] == 20
        assert "averageOptionsPerQuestion" in body

    def test_validation(self, client):
        assert client.get("/api/v1/questions/validation").json() == {"isValid": True, "errors": []}


class TestDiscoveryApi:
    """Tests for the discovery session endpoints."""

    def test_create_requires_identity(self, client):
        response = client.post(
            "/api/v1/discovery/sessions",
            json={"targetUserId": TARGET_ID, "targetUserName": "Taylor"},
        )
        assert response.status_code == 401
        assert response.json()["error"] == "authentication_required"

    def test_full_flow(self, client):
        session = _start_session(client)
        assert session["status"] == "pending_initiator"
        assert session["targetUserId"] == TARGET_ID
        assert len(session["questions"]) == 5

        url = f"/api/v1/discovery/sessions/{session['id']}"
        answers = _same_answers(session)

        response = client.post(f"{url}/initiator-answers", json={"answers": answers}, headers=INITIATOR)
        assert response.status_code == 200
        assert response.json()["status"] == "pending_target"

        pending = client.get("/api/v1/discovery/pending", headers=TARGET).json()
        assert [s["id"] for s in pending] == [session["id"]]

        response = client.post(f"{url}/target-answers", json={"answers": answers}, headers=TARGET)
        assert response.status_code == 200
        result = response.json()
        assert result["score"] == 100
        assert result["matches"][0]["isMatch"] is True
        assert result["insights"][0].startswith("🎯")

        stored = client.get(url, headers=TARGET).json()
        assert stored["status"] == "completed"
        assert stored["compatibilityScore"] == 100

        completed = client.get("/api/v1/discovery/completed", headers=INITIATOR).json()
        assert [s["id"] for s in completed] == [session["id"]]

        again = client.post(f"{url}/target-answers", json={"answers": {}}, headers=TARGET)
        assert again.status_code == 409
        assert again.json()["error"] == "invalid_session_state"

    def test_view_rules(self, client):
        session = _start_session(client)
        url = f"/api/v1/discovery/sessions/{session['id']}"
        assert client.get(url).status_code == 200
        assert client.get(url, headers=STRANGER).status_code == 403
        assert client.get("/api/v1/discovery/sessions/nope", headers=INITIATOR).status_code == 404

    def test_expired_session(self, client):
        response = client.get("/api/v1/discovery/sessions/stale-session", headers=TARGET)
        assert response.status_code == 410
        assert response.json()["error"] == "session_expired"

    def test_sweep(self, client):
        assert client.post("/api/v1/discovery/sweep", headers=INITIATOR).json() == {"expiredCount": 1}
        assert client.post("/api/v1/discovery/sweep", headers=INITIATOR).json() == {"expiredCount": 0}

    def test_sweep_requires_identity(self, client):
        response = client.post("/api/v1/discovery/sweep")
        assert response.status_code == 401
        # Nothing was swept.
        assert client.post("/api/v1/discovery/sweep", headers=INITIATOR).json() == {"expiredCount": 1}

    def test_lists_require_identity(self, client):
        assert client.get("/api/v1/discovery/pending").status_code == 401
        assert client.get("/api/v1/discovery/completed").status_code == 401

    def test_event_stream_ends_on_completion(self, client):
        session = _start_session(client)
        url = f"/api/v1/discovery/sessions/{session['id']}"
        answers = _same_answers(session)
        client.post(f"{url}/initiator-answers", json={"answers": answers}, headers=INITIATOR)
        client.post(f"{url}/target-answers", json={"answers": answers}, headers=TARGET)

        with client.stream("GET", f"{url}/events", headers=INITIATOR) as response:
            assert response.status_code == 200
            assert response.headers["content-type"].startswith("text/event-stream")
            lines = [line for line in response.iter_lines() if line.startswith("data: ")]

        assert len(lines) == 1
        event = json.loads(lines[0][len("data: "):])
        assert event["status"] == "completed"
        assert event["compatibilityScore"] == 100

    def test_event_stream_checks_access(self, client):
        session = _start_session(client)
        response = client.get(f"/api/v1/discovery/sessions/{session['id']}/events", headers=STRANGER)
        assert response.status_code == 403


class TestConnectionsApi:
    """Tests for connection, chat and card endpoints."""

    def test_card_lookup(self, client):
        body = client.get("/api/v1/cards/ABC123").json()
        last_used = body.pop("lastUsed")
        assert body == {
            "userId": TARGET_ID,
            "username": "taylor",
            "active": True,
            "code": "ABC123",
            "url": "https://tappr.uk/c/ABC123",
            "tapCount": 1,
        }
        assert last_used is not None
        assert client.get("/api/v1/cards/ABC123").json()["tapCount"] == 2
        missing = client.get("/api/v1/cards/NOPE")
        assert missing.status_code == 404
        assert missing.json()["error"] == "card_not_found"

    def test_card_request_accept_and_chat(self, client):
        response = client.post(
            "/api/v1/connections/from-card",
            json={"cardCode": "ABC123", "fromUserName": "Jordan", "type": "date"},
            headers=INITIATOR,
        )
        assert response.status_code == 201
        connection = response.json()
        assert connection["toUserId"] == TARGET_ID
        assert connection["type"] == "date"
        assert connection["status"] == "pending"

        received = client.get("/api/v1/connections/received", headers=TARGET).json()
        assert [c["id"] for c in received] == [connection["id"]]

        chat = client.post(f"/api/v1/connections/{connection['id']}/accept", headers=TARGET).json()
        assert chat["participants"] == [INITIATOR_ID, TARGET_ID]

        assert client.get(f"/api/v1/chats/{chat['id']}", headers=INITIATOR).status_code == 200
        assert client.get(f"/api/v1/chats/{chat['id']}", headers=STRANGER).status_code == 403

        declined = client.post(f"/api/v1/connections/{connection['id']}/decline", headers=TARGET)
        assert declined.status_code == 409

        sent = client.get("/api/v1/connections/sent", headers=INITIATOR).json()
        assert sent[0]["status"] == "accepted"
        assert sent[0]["chatId"] == chat["id"]

    def test_inactive_card(self, client):
        response = client.post(
            "/api/v1/connections/from-card", json={"cardCode": "GONE99"}, headers=INITIATOR
        )
        assert response.status_code == 410

    def test_direct_request_and_decline(self, client):
        response = client.post(
            "/api/v1/connections",
            json={"toUserId": TARGET_ID, "toUserName": "taylor"},
            headers=INITIATOR,
        )
        connection = response.json()
        assert connection["fromUserName"] == "Anonymous"

        assert client.post(f"/api/v1/connections/{connection['id']}/decline", headers=INITIATOR).status_code == 403
        declined = client.post(f"/api/v1/connections/{connection['id']}/decline", headers=TARGET)
        assert declined.json()["status"] == "declined"

    def test_requires_identity(self, client):
        assert client.get("/api/v1/connections/received").status_code == 401

    def test_chat_messaging(self, client):
        connection = client.post(
            "/api/v1/connections",
            json={"toUserId": TARGET_ID, "toUserName": "taylor", "fromUserName": "Jordan"},
            headers=INITIATOR,
        ).json()
        chat = client.post(f"/api/v1/connections/{connection['id']}/accept", headers=TARGET).json()
        url = f"/api/v1/chats/{chat['id']}"

        sent = client.post(f"{url}/messages", json={"text": "Hi Taylor!"}, headers=INITIATOR)
        assert sent.status_code == 201
        assert sent.json()["senderName"] == "Jordan"
        assert client.post(f"{url}/messages", json={"text": ""}, headers=INITIATOR).status_code == 422
        assert client.post(f"{url}/messages", json={"text": "hey"}, headers=STRANGER).status_code == 403

        chats = client.get("/api/v1/chats", headers=TARGET).json()
        assert [c["id"] for c in chats] == [chat["id"]]
        assert chats[0]["lastMessage"] == "Hi Taylor!"
        assert chats[0]["unreadCount"][TARGET_ID] == 1

        messages = client.get(f"{url}/messages", headers=TARGET).json()
        assert [m["text"] for m in messages] == ["Hi Taylor!"]

        marked = client.post(f"{url}/read", headers=TARGET).json()
        assert marked["unreadCount"][TARGET_ID] == 0
        assert client.get(f"{url}/messages", headers=TARGET).json()[0]["read"] is True

        assert client.get("/api/v1/chats").status_code == 401


async def _never_disconnected():
    return False


def _pending_session(clock, hours_left):
    return DiscoverySession(
        id="s1",
        initiator_id=INITIATOR_ID,
        initiator_name="Jordan",
        target_user_id=TARGET_ID,
        target_user_name="Taylor",
        questions=QuestionBank().all_questions()[:5],
        status=SessionStatus.PENDING_TARGET,
        created_at=clock.now - timedelta(hours=1),
        expires_at=clock.now + timedelta(hours=hours_left),
    )


def _statuses(frames):
    return [json.loads(f.split("data: ", 1)[1])["status"] for f in frames if f.startswith("event: session")]


class TestSessionEventStream:
    """Tests for the SSE frame generator behind /events."""

    async def test_ends_after_terminal_status(self, clock):
        queue = asyncio.Queue()
        session = _pending_session(clock, hours_left=5)
        queue.put_nowait(session)
        queue.put_nowait(session.model_copy(update={"status": SessionStatus.COMPLETED}))

        frames = [f async for f in session_events(queue, clock, _never_disconnected)]
        assert _statuses(frames) == ["pending_target", "completed"]

    async def test_delivered_session_past_deadline_closes_stream(self, clock):
        queue = asyncio.Queue()
        queue.put_nowait(_pending_session(clock, hours_left=-1))

        frames = [f async for f in session_events(queue, clock, _never_disconnected)]
        assert _statuses(frames) == ["expired"]

    async def test_quiet_session_expires_on_keepalive(self, clock):
        queue = asyncio.Queue()
        queue.put_nowait(_pending_session(clock, hours_left=1))

        frames = []
        async for frame in session_events(queue, clock, _never_disconnected, keepalive_seconds=0.01):
            frames.append(frame)
            if frame.startswith(": keep-alive"):
                clock.advance(hours=2)

        assert frames[1] == ": keep-alive\n\n"
        assert _statuses(frames) == ["pending_target", "expired"]

    async def test_deleted_session(self, clock):
        queue = asyncio.Queue()
        queue.put_nowait(None)
        frames = [f async for f in session_events(queue, clock, _never_disconnected)]
        assert frames == ["event: deleted\ndata: {}\n\n"]
