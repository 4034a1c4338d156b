"""
Tappr — Request dependencies

Services are built once in the application lifespan and parked on
``app.state``; these helpers hand them to endpoints through ``Depends``.
The caller's identity arrives in the ``X-User-Id`` header, set by the auth
layer in front of the API.  A missing header means a signed-out caller.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Header, Request

from tappr.errors import AuthenticationRequired
from tappr.services.card_service import CardService
from tappr.services.connection_service import ConnectionService
from tappr.services.discovery_service import DiscoveryService
from tappr.services.question_bank import QuestionBank
from tappr.store.base import DocumentStore


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_question_bank(request: Request) -> QuestionBank:
    return request.app.state.question_bank


def get_discovery_service(request: Request) -> DiscoveryService:
    return request.app.state.discovery_service


def get_connection_service(request: Request) -> ConnectionService:
    return request.app.state.connection_service


def get_card_service(request: Request) -> CardService:
    return request.app.state.card_service


def get_identity(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Return the caller's user id, or None when signed out."""
    if x_user_id is None:
        return None
    return x_user_id.strip() or None


def require_identity(x_user_id: Optional[str] = Header(default=None)) -> str:
    user_id = get_identity(x_user_id)
    if user_id is None:
        raise AuthenticationRequired()
    return user_id
