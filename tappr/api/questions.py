"""
Tappr — Question bank API

Read-only access to the compatibility question catalog, its statistics and
its integrity report (used by the admin question browser).
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from tappr.api.deps import get_question_bank
from tappr.schemas.question import (
    BankStats,
    BankValidation,
    CompatibilityQuestion,
    QuestionCategory,
)
from tappr.services.question_bank import QuestionBank

router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# GET / — List questions
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "",
    response_model=list[CompatibilityQuestion],
    summary="List compatibility questions",
)
async def list_questions(
    category: Optional[QuestionCategory] = Query(None, description="Only this category"),
    bank: QuestionBank = Depends(get_question_bank),
) -> list[CompatibilityQuestion]:
    """Return the catalog in source order, optionally filtered by category."""
    if category is None:
        return list(bank.all_questions())
    return bank.questions_by_category(category)


# ──────────────────────────────────────────────────────────────────────────────
# GET /stats — Catalog statistics
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/stats",
    response_model=BankStats,
    summary="Question counts per category and mean options per question",
)
async def question_stats(bank: QuestionBank = Depends(get_question_bank)) -> BankStats:
    return bank.stats()


# ──────────────────────────────────────────────────────────────────────────────
# GET /validation — Integrity report
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/validation",
    response_model=BankValidation,
    summary="Validate the question catalog",
)
async def validate_questions(bank: QuestionBank = Depends(get_question_bank)) -> BankValidation:
    return bank.validate()
