"""
Tappr — Discovery API

Endpoints for the "find out more" flow: starting a session from a profile
card, submitting each party's answers, reading a session, streaming live
session changes to a waiting party, and the expiry sweep.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import AsyncIterator, Awaitable, Callable, Optional

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import StreamingResponse

from tappr.api.deps import get_discovery_service, get_identity, require_identity
from tappr.schemas.discovery import (
    CompatibilityResult,
    CreateSessionRequest,
    DiscoverySession,
    SessionStatus,
    SubmitAnswersRequest,
    SweepResponse,
)
from tappr.services.discovery_service import DiscoveryService

logger = structlog.get_logger("tappr.api.discovery")

router = APIRouter()

_TERMINAL_STATUSES = (SessionStatus.COMPLETED, SessionStatus.EXPIRED)
_KEEPALIVE_SECONDS = 15.0


# ──────────────────────────────────────────────────────────────────────────────
# POST /sessions — Start a discovery session
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/sessions",
    response_model=DiscoverySession,
    status_code=status.HTTP_201_CREATED,
    summary="Start a discovery session with a card owner",
)
async def create_session(
    body: CreateSessionRequest,
    caller_id: Optional[str] = Depends(get_identity),
    service: DiscoveryService = Depends(get_discovery_service),
) -> DiscoverySession:
    return await service.create_session(
        initiator_id=caller_id,
        target_user_id=body.target_user_id,
        target_user_name=body.target_user_name,
        initiator_name=body.initiator_name,
    )


# ──────────────────────────────────────────────────────────────────────────────
# GET /sessions/{session_id} — Read a session
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/sessions/{session_id}",
    response_model=DiscoverySession,
    summary="Get a discovery session",
)
async def get_session(
    session_id: str,
    viewer_id: Optional[str] = Depends(get_identity),
    service: DiscoveryService = Depends(get_discovery_service),
) -> DiscoverySession:
    return await service.view_session(session_id, viewer_id)


# ──────────────────────────────────────────────────────────────────────────────
# POST /sessions/{session_id}/initiator-answers
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/sessions/{session_id}/initiator-answers",
    response_model=DiscoverySession,
    summary="Submit the initiator's answers",
)
async def submit_initiator_answers(
    session_id: str,
    body: SubmitAnswersRequest,
    caller_id: Optional[str] = Depends(get_identity),
    service: DiscoveryService = Depends(get_discovery_service),
) -> DiscoverySession:
    return await service.submit_initiator_answers(session_id, body.answers, caller_id)


# ──────────────────────────────────────────────────────────────────────────────
# POST /sessions/{session_id}/target-answers
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/sessions/{session_id}/target-answers",
    response_model=CompatibilityResult,
    summary="Submit the target's answers and get the compatibility result",
)
async def submit_target_answers(
    session_id: str,
    body: SubmitAnswersRequest,
    caller_id: Optional[str] = Depends(get_identity),
    service: DiscoveryService = Depends(get_discovery_service),
) -> CompatibilityResult:
    return await service.submit_target_answers(session_id, body.answers, caller_id)


# ──────────────────────────────────────────────────────────────────────────────
# GET /sessions/{session_id}/events — Live session stream (SSE)
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/sessions/{session_id}/events",
    summary="Stream session changes as server-sent events",
    response_class=StreamingResponse,
)
async def stream_session(
    session_id: str,
    request: Request,
    viewer_id: Optional[str] = Depends(get_identity),
    service: DiscoveryService = Depends(get_discovery_service),
) -> StreamingResponse:
    """Send the current session, then every change until it is completed or expired.

    Each event carries the full session; clients must tolerate repeats.
    """
    await service.view_session(session_id, viewer_id)

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[Optional[DiscoverySession]] = asyncio.Queue()

    def _on_change(session: Optional[DiscoverySession]) -> None:
        # Store backends may call back from their own threads.
        loop.call_soon_threadsafe(queue.put_nowait, session)

    unsubscribe = await service.subscribe_to_session(session_id, _on_change)
    log = logger.bind(session_id=session_id, viewer_id=viewer_id)
    log.info("session_stream_opened")

    async def _events() -> AsyncIterator[str]:
        try:
            async for chunk in session_events(queue, service.clock, request.is_disconnected):
                yield chunk
        finally:
            unsubscribe()
            log.info("session_stream_closed")

    return StreamingResponse(
        _events(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


def _as_of(session: DiscoverySession, now: datetime) -> DiscoverySession:
    """Report a pending session past its deadline as expired, swept or not."""
    if session.status not in _TERMINAL_STATUSES and session.is_expired(now):
        return session.model_copy(update={"status": SessionStatus.EXPIRED})
    return session


def _frame(session: DiscoverySession) -> str:
    return f"event: session\ndata: {session.model_dump_json(by_alias=True)}\n\n"


async def session_events(
    queue: asyncio.Queue,
    clock: Callable[[], datetime],
    is_disconnected: Callable[[], Awaitable[bool]],
    keepalive_seconds: float = _KEEPALIVE_SECONDS,
) -> AsyncIterator[str]:
    """Turn queued session snapshots into SSE frames until the session ends.

    The stream ends after a completed or expired session is sent, when the
    session is deleted, or when the client goes away.  A session that passes
    its deadline while nothing changes is sent once more as expired.
    """
    latest: Optional[DiscoverySession] = None
    while True:
        try:
            session = await asyncio.wait_for(queue.get(), timeout=keepalive_seconds)
        except asyncio.TimeoutError:
            if await is_disconnected():
                return
            if latest is not None:
                current = _as_of(latest, clock())
                if current.status in _TERMINAL_STATUSES:
                    yield _frame(current)
                    return
            yield ": keep-alive\n\n"
            continue

        if session is None:
            yield "event: deleted\ndata: {}\n\n"
            return

        latest = _as_of(session, clock())
        yield _frame(latest)
        if latest.status in _TERMINAL_STATUSES:
            return


# ──────────────────────────────────────────────────────────────────────────────
# GET /pending, GET /completed — Per-user session lists
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/pending",
    response_model=list[DiscoverySession],
    summary="Sessions waiting for the caller's answers",
)
async def list_pending(
    caller_id: str = Depends(require_identity),
    service: DiscoveryService = Depends(get_discovery_service),
) -> list[DiscoverySession]:
    return await service.list_pending_for_target(caller_id)


@router.get(
    "/completed",
    response_model=list[DiscoverySession],
    summary="Completed sessions the caller started",
)
async def list_completed(
    caller_id: str = Depends(require_identity),
    service: DiscoveryService = Depends(get_discovery_service),
) -> list[DiscoverySession]:
    return await service.list_completed_for_initiator(caller_id)


# ──────────────────────────────────────────────────────────────────────────────
# POST /sweep — Expire stale sessions
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/sweep",
    response_model=SweepResponse,
    summary="Expire pending sessions past their deadline",
)
async def sweep_expired(
    caller_id: str = Depends(require_identity),
    service: DiscoveryService = Depends(get_discovery_service),
) -> SweepResponse:
    expired = await service.sweep_expired_sessions()
    logger.info("sweep_requested", caller_id=caller_id, expired=expired)
    return SweepResponse(expired_count=expired)
