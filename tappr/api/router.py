"""
Tappr — Main API Router

Aggregates all sub-routers under a single prefix so that ``tappr.main``
can mount the entire API surface with one ``include_router`` call.
"""

from fastapi import APIRouter

from tappr.api import cards, connections, discovery, questions

router = APIRouter()

router.include_router(questions.router, prefix="/questions", tags=["Questions"])
router.include_router(discovery.router, prefix="/discovery", tags=["Discovery"])
router.include_router(connections.router, prefix="/connections", tags=["Connections"])
router.include_router(connections.chats_router, prefix="/chats", tags=["Chats"])
router.include_router(cards.router, prefix="/cards", tags=["Cards"])
