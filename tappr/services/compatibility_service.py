"""
Tappr — Compatibility scoring and insight generation.

Compares the two parties' answers to a discovery session's fixed questions:
  1. Per question, exact string equality of the chosen options
     (case-sensitive, no trimming).  Two missing answers count as a
     match; one missing answer never does.
  2. score = round_half_up(100 × matches / total)
     With 5 questions the only possible scores are 0, 20, 40, 60, 80, 100.
  3. Insights: one score-tier message, then the first agreed question (if
     any), then the first differing question when answers are mixed.
"""

from __future__ import annotations

import math
from typing import Mapping, Sequence

import structlog

from tappr.schemas.discovery import AnswerMatch, CompatibilityResult
from tappr.schemas.question import CompatibilityQuestion

logger = structlog.get_logger("tappr.compatibility_service")


class CompatibilityService:
    """Scores answer agreement and explains it in a few short sentences."""

    # ── Score tiers (evaluated top-down, first match wins) ──────────────
    TIERS: list[tuple[int, str, str]] = [
        (80, "highly_compatible",
         "🎯 You're incredibly compatible! You share similar values and preferences."),
        (60, "great_compatibility",
         "✨ Great compatibility! You have a solid foundation with some interesting differences."),
        (40, "mixed_compatibility",
         "🤔 Mixed compatibility. You have some things in common but also unique perspectives."),
        (0, "different_perspectives",
         "🌈 Different perspectives! You might learn a lot from each other."),
    ]

    AGREED_TEMPLATE: str = '🤝 You both agreed on: "{question}"'
    DIFFERENT_TEMPLATE: str = (
        '💭 Different views on: "{question}" - could make for interesting conversations!'
    )

    # ── Public API ──────────────────────────────────────────────────────

    def calculate_compatibility(
        self,
        questions: Sequence[CompatibilityQuestion],
        initiator_answers: Mapping[str, str],
        target_answers: Mapping[str, str],
    ) -> CompatibilityResult:
        """Compare both answer maps over ``questions`` (in session order)."""
        matches = [
            self._compare(q, initiator_answers.get(q.id), target_answers.get(q.id))
            for q in questions
        ]
        match_count = sum(1 for m in matches if m.is_match)
        score = self._percentage(match_count, len(matches))
        insights = self._generate_insights(score, matches)

        logger.info(
            "compatibility_calculated",
            score=score,
            match_count=match_count,
            total=len(matches),
            tier=self.score_tier(score),
        )
        return CompatibilityResult(score=score, matches=matches, insights=insights)

    def score_tier(self, score: int) -> str:
        return self._tier_for(score)[1]

    # ── Internals ───────────────────────────────────────────────────────

    @staticmethod
    def _compare(
        question: CompatibilityQuestion,
        initiator_answer: str | None,
        target_answer: str | None,
    ) -> AnswerMatch:
        # Two unanswered questions compare equal, as two identical choices do.
        is_match = initiator_answer == target_answer
        return AnswerMatch(
            question_id=question.id,
            question=question.question,
            initiator_answer=initiator_answer,
            target_answer=target_answer,
            is_match=is_match,
        )

    @staticmethod
    def _percentage(match_count: int, total: int) -> int:
        if total == 0:
            return 0
        # Half-up; Python's round() would send 12.5 to 12.
        return int(math.floor(100 * match_count / total + 0.5))

    def _tier_for(self, score: int) -> tuple[int, str, str]:
        for tier in self.TIERS:
            if score >= tier[0]:
                return tier
        return self.TIERS[-1]

    def _generate_insights(self, score: int, matches: Sequence[AnswerMatch]) -> list[str]:
        insights = [self._tier_for(score)[2]]

        agreed = [m for m in matches if m.is_match]
        if agreed:
            insights.append(self.AGREED_TEMPLATE.format(question=agreed[0].question))

        differences = [m for m in matches if not m.is_match]
        if 0 < len(differences) < len(matches):
            insights.append(self.DIFFERENT_TEMPLATE.format(question=differences[0].question))

        return insights
