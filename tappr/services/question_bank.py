"""
Tappr — Compatibility question bank.

Holds the immutable catalog of compatibility questions and exposes lookup,
sampling, integrity validation and statistics.

Balanced sampling spreads ``count`` across the declared categories:
  1. Each category is owed ``floor(count / n_categories)`` questions and the
     first ``count mod n_categories`` categories (declared order) one more.
  2. A category that cannot pay its share gives all it has; the shortfall
     goes one slot at a time to the open category with the fewest slots so
     far (ties resolved in declared order), so ``count <= total`` always
     yields exactly ``count`` questions.
  3. Each category's slots are a uniform random sample of its questions and
     the combined selection is shuffled.
"""

from __future__ import annotations

import random
from collections import Counter
from typing import Iterable, Optional

import structlog

from tappr.data.compatibility_questions import COMPATIBILITY_QUESTIONS
from tappr.schemas.question import (
    BankStats,
    BankValidation,
    CompatibilityQuestion,
    QuestionCategory,
)

logger = structlog.get_logger("tappr.question_bank")


class QuestionBank:
    """Immutable question catalog with sampling helpers.

    Construct once at startup and inject it where needed; the catalog never
    changes after construction.  Pass a seeded ``random.Random`` for
    reproducible sampling.
    """

    CATEGORIES: tuple[QuestionCategory, ...] = tuple(QuestionCategory)
    MIN_OPTIONS: int = 2
    MAX_OPTIONS: int = 6

    def __init__(
        self,
        questions: Optional[Iterable[CompatibilityQuestion | dict]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        source = COMPATIBILITY_QUESTIONS if questions is None else questions
        self._questions: tuple[CompatibilityQuestion, ...] = tuple(
            q if isinstance(q, CompatibilityQuestion) else CompatibilityQuestion.model_validate(q)
            for q in source
        )
        self._by_id = {q.id: q for q in self._questions}
        self._rng = rng or random.Random()

    # ── Lookup ──────────────────────────────────────────────────────────

    def all_questions(self) -> tuple[CompatibilityQuestion, ...]:
        return self._questions

    def questions_by_category(self, category: QuestionCategory | str) -> list[CompatibilityQuestion]:
        category = QuestionCategory(category)
        return [q for q in self._questions if q.category == category]

    def get_question(self, question_id: str) -> Optional[CompatibilityQuestion]:
        return self._by_id.get(question_id)

    # ── Sampling ────────────────────────────────────────────────────────

    def random_questions(self, count: int = 5) -> list[CompatibilityQuestion]:
        """Uniform sample of distinct questions, no category balancing."""
        count = max(0, min(count, len(self._questions)))
        return self._rng.sample(self._questions, count)

    def balanced_random_questions(self, count: int = 5) -> list[CompatibilityQuestion]:
        """Sample ``count`` distinct questions spread evenly across categories."""
        pools = {c: self.questions_by_category(c) for c in self.CATEGORIES}
        quotas = self._allocate_quotas(count, {c: len(pool) for c, pool in pools.items()})

        selected: list[CompatibilityQuestion] = []
        for category in self.CATEGORIES:
            selected.extend(self._rng.sample(pools[category], quotas[category]))

        self._rng.shuffle(selected)
        return selected

    def _allocate_quotas(
        self, count: int, available: dict[QuestionCategory, int]
    ) -> dict[QuestionCategory, int]:
        """Water-fill ``count`` slots over categories, capped by availability."""
        quotas = {c: 0 for c in self.CATEGORIES}
        remaining = max(0, min(count, sum(available.values())))

        while remaining > 0:
            open_categories = [c for c in self.CATEGORIES if quotas[c] < available[c]]
            # min() keeps the first of equal candidates, i.e. declared order.
            target = min(open_categories, key=lambda c: quotas[c])
            quotas[target] += 1
            remaining -= 1

        return quotas

    # ── Integrity & stats ───────────────────────────────────────────────

    def validate(self) -> BankValidation:
        """Check ids are unique, fields are populated and option counts are 2-6.

        Problems are reported, never raised: the bank stays usable.
        """
        errors: list[str] = []

        ids = [q.id for q in self._questions]
        duplicates = sorted(qid for qid, n in Counter(ids).items() if n > 1)
        if duplicates:
            errors.append(f"Duplicate question IDs found: {', '.join(duplicates)}")

        for index, q in enumerate(self._questions):
            if not (q.id and q.question and q.category and q.options and q.emoji):
                errors.append(f"Question at index {index} is missing required fields")
            if len(q.options) < self.MIN_OPTIONS:
                errors.append(f'Question "{q.id}" has less than {self.MIN_OPTIONS} options')
            if len(q.options) > self.MAX_OPTIONS:
                errors.append(
                    f'Question "{q.id}" has more than {self.MAX_OPTIONS} options (may not display well)'
                )

        result = BankValidation(is_valid=not errors, errors=errors)
        if not result.is_valid:
            logger.warning("question_bank_invalid", error_count=len(errors), errors=errors)
        return result

    def stats(self) -> BankStats:
        total = len(self._questions)
        categories = Counter(q.category.value for q in self._questions)
        option_total = sum(len(q.options) for q in self._questions)
        return BankStats(
            total=total,
            categories=dict(categories),
            average_options_per_question=(option_total / total) if total else 0.0,
        )
