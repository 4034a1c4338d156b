"""
Tappr — Error taxonomy.

Services raise these; the API layer turns every ``TapprError`` into a JSON
response using the ``status_code`` and ``error_code`` carried by the class.
"""

from __future__ import annotations


class TapprError(Exception):
    """Base class for every error surfaced to callers."""

    status_code: int = 400
    error_code: str = "tappr_error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.__class__.__doc__ or self.error_code
        super().__init__(self.detail)


# ── Identity ──────────────────────────────────────────────────────────────────

class AuthenticationRequired(TapprError):
    """This operation requires a signed-in user."""

    status_code = 401
    error_code = "authentication_required"


class NotAuthorized(TapprError):
    """You are not authorized to access this resource."""

    status_code = 403
    error_code = "not_authorized"


# ── Discovery sessions ────────────────────────────────────────────────────────

class SessionNotFound(TapprError):
    """Discovery session not found."""

    status_code = 404
    error_code = "session_not_found"


class SessionExpired(TapprError):
    """This discovery session has expired."""

    status_code = 410
    error_code = "session_expired"


class InvalidSessionState(TapprError):
    """The discovery session cannot accept this action in its current state."""

    status_code = 409
    error_code = "invalid_session_state"


# ── Connections, chats and cards ──────────────────────────────────────────────

class ConnectionNotFound(TapprError):
    """Connection request not found."""

    status_code = 404
    error_code = "connection_not_found"


class InvalidConnectionState(TapprError):
    """The connection request has already been answered."""

    status_code = 409
    error_code = "invalid_connection_state"


class ChatNotFound(TapprError):
    """Chat not found."""

    status_code = 404
    error_code = "chat_not_found"


class CardNotFound(TapprError):
    """Card not found."""

    status_code = 404
    error_code = "card_not_found"


class CardInactive(TapprError):
    """This card is no longer active."""

    status_code = 410
    error_code = "card_inactive"


# ── Document store ────────────────────────────────────────────────────────────

class DocumentNotFound(TapprError):
    """Document not found."""

    status_code = 404
    error_code = "document_not_found"

    def __init__(self, collection: str, doc_id: str) -> None:
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"Document {collection}/{doc_id} not found.")


class WriteConflict(TapprError):
    """The document was modified concurrently; please retry."""

    status_code = 409
    error_code = "write_conflict"
