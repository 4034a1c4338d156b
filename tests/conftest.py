"""Shared pytest fixtures for Tappr tests."""
import asyncio
import random
from datetime import datetime, timedelta, timezone

import pytest

from tappr.schemas.question import CompatibilityQuestion
from tappr.services.card_service import CARD_CODES_COLLECTION, CardService
from tappr.services.compatibility_service import CompatibilityService
from tappr.services.connection_service import ConnectionService
from tappr.services.discovery_service import DiscoveryService
from tappr.services.question_bank import QuestionBank
from tappr.store.memory import MemoryDocumentStore

INITIATOR_ID = "user-initiator"
TARGET_ID = "user-target"
STRANGER_ID = "user-stranger"


class InterleavingStore(MemoryDocumentStore):
    """Memory store that yields to the event loop after every get and query.

    Concurrent callers all see the same snapshot before any of them writes,
    so conditional updates actually race.
    """

    def __init__(self):
        super().__init__()
        self.update_if_results: list[bool] = []

    async def get(self, collection, doc_id):
        document = await super().get(collection, doc_id)
        await asyncio.sleep(0)
        return document

    async def query(self, collection, filters=()):
        documents = await super().query(collection, filters)
        await asyncio.sleep(0)
        return documents

    async def update_if(self, collection, doc_id, changes, *, field, expected):
        applied = await super().update_if(
            collection, doc_id, changes, field=field, expected=expected
        )
        self.update_if_results.append(applied)
        return applied


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def store():
    return MemoryDocumentStore()


@pytest.fixture
def question_bank():
    return QuestionBank(rng=random.Random(1234))


@pytest.fixture
def compatibility_service():
    return CompatibilityService()


@pytest.fixture
def discovery_service(store, question_bank, clock):
    return DiscoveryService(store, question_bank, clock=clock)


@pytest.fixture
def card_service(store, clock):
    return CardService(store, base_url="https://tappr.uk/c", clock=clock)


@pytest.fixture
def connection_service(store, card_service, clock):
    return ConnectionService(store, card_service, clock=clock)


@pytest.fixture
async def registered_card(store):
    """An active card ``ABC123`` owned by the target user."""
    await store.add(
        CARD_CODES_COLLECTION,
        {"code": "ABC123", "userId": TARGET_ID, "username": "taylor", "active": True},
    )
    return "ABC123"


def make_questions(count: int) -> list[CompatibilityQuestion]:
    """Build ``count`` throwaway questions with ids q1..qN."""
    return [
        CompatibilityQuestion(
            id=f"q{i}",
            question=f"Question {i}?",
            category="lifestyle",
            options=("A", "B", "C", "D"),
            emoji="❓",
        )
        for i in range(1, count + 1)
    ]


def answers_for(session, *choices: str) -> dict[str, str]:
    """Map a session's questions, in order, to ``choices``."""
    return {q.id: choice for q, choice in zip(session.questions, choices)}


def first_options(session) -> dict[str, str]:
    return {q.id: q.options[0] for q in session.questions}
