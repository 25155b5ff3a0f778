"""
Dietwise — Health Advisory Engine

Turns a participant's stored survey answers into a 1-10 health score and a
templated narrative, then persists the result as an ``Advisory`` row.

Scoring rules (baseline 5, clamped to [1, 10]):
  fruit servings      >= 2  -> +1     == 0 -> -1
  vegetable servings  >= 3  -> +1     <= 1 -> -1
  water intake        "7-8 glasses" / "More than 8" -> +1
                      "Less than 4"                 -> -1

Each rule reads the first answer whose question text mentions its keyword
(see ``answer_lookup``).  A rule with no matching answer is skipped.

Narrative bands (first match wins, evaluated top-down):
  >= 8 excellent | >= 6 good | >= 4 fair | otherwise needs_attention
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Sequence

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from dietwise.models import (
    Advisory,
    Gender,
    Participant,
    ParticipantCategory,
    Question,
    Response,
)
from dietwise.services.answer_lookup import (
    FRUIT_KEYWORD,
    VEGETABLE_KEYWORD,
    WATER_KEYWORD,
    AnsweredQuestion,
    find_answer,
    parse_count,
    to_answered,
)

logger = structlog.get_logger("dietwise.advisory_service")


# ──────────────────────────────────────────────────────────────────────────────
# Scorer
# ──────────────────────────────────────────────────────────────────────────────


@dataclass
class ScoreAdjustment:
    rule: str
    question_text: str
    answer: str
    delta: int


@dataclass
class ScoreResult:
    score: int
    baseline: int
    adjustments: list[ScoreAdjustment] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "score": self.score,
            "baseline": self.baseline,
            "adjustments": [
                {
                    "rule": a.rule,
                    "question_text": a.question_text,
                    "answer": a.answer,
                    "delta": a.delta,
                }
                for a in self.adjustments
            ],
        }


class AdvisoryScorer:
    """Heuristic 1-10 health score over a participant's dietary answers.

    Pure: no I/O, never raises for missing or malformed answers.
    """

    BASELINE_SCORE: int = 5
    MIN_SCORE: int = 1
    MAX_SCORE: int = 10

    FRUIT_GOOD_MIN: int = 2
    VEGETABLE_GOOD_MIN: int = 3
    VEGETABLE_POOR_MAX: int = 1

    WATER_GOOD_MARKERS: tuple[str, ...] = ("7-8 glasses", "More than 8")
    WATER_POOR_MARKERS: tuple[str, ...] = ("Less than 4",)

    def score(self, responses: Sequence[AnsweredQuestion]) -> int:
        return self.evaluate(responses).score

    def evaluate(self, responses: Sequence[AnsweredQuestion]) -> ScoreResult:
        """Score ``responses`` and return the per-rule breakdown."""
        responses = to_answered(responses)
        result = ScoreResult(score=self.BASELINE_SCORE, baseline=self.BASELINE_SCORE)
        total = self.BASELINE_SCORE

        for rule, keyword, adjust in (
            ("fruit", FRUIT_KEYWORD, self._fruit_delta),
            ("vegetable", VEGETABLE_KEYWORD, self._vegetable_delta),
            ("water", WATER_KEYWORD, self._water_delta),
        ):
            match = find_answer(responses, keyword)
            if match is None:
                continue
            delta = adjust(match.answer)
            total += delta
            result.adjustments.append(
                ScoreAdjustment(
                    rule=rule,
                    question_text=match.question_text,
                    answer=match.answer,
                    delta=delta,
                )
            )

        result.score = self._clamp(total)
        return result

    # ── Rules ───────────────────────────────────────────────────────

    def _fruit_delta(self, answer: str) -> int:
        count = parse_count(answer)
        if count >= self.FRUIT_GOOD_MIN:
            return 1
        if count == 0:
            return -1
        return 0

    def _vegetable_delta(self, answer: str) -> int:
        count = parse_count(answer)
        if count >= self.VEGETABLE_GOOD_MIN:
            return 1
        if count <= self.VEGETABLE_POOR_MAX:
            return -1
        return 0

    def _water_delta(self, answer: str) -> int:
        if any(marker in answer for marker in self.WATER_GOOD_MARKERS):
            return 1
        if any(marker in answer for marker in self.WATER_POOR_MARKERS):
            return -1
        return 0

    def _clamp(self, value: int) -> int:
        return max(self.MIN_SCORE, min(self.MAX_SCORE, value))


# ──────────────────────────────────────────────────────────────────────────────
# Composer
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class AdvisoryBand:
    name: str
    min_score: int
    content: str
    recommendations: tuple[str, ...]


@dataclass(frozen=True)
class ComposedAdvisory:
    title: str
    content: str
    recommendations: str
    health_score: int
    band: str


class AdvisoryComposer:
    """Maps a health score to fixed narrative text and recommendations."""

    TITLE_PREFIX: str = "Health Advisory for "
    RECOMMENDATION_SEPARATOR: str = ". "

    BANDS: tuple[AdvisoryBand, ...] = (
        AdvisoryBand(
            name="excellent",
            min_score=8,
            content=(
                "Excellent! Your eating habits show a well-balanced and nutritious "
                "diet. You're consuming adequate fruits, vegetables, and water, "
                "which contributes to overall health and wellness."
            ),
            recommendations=(
                "Continue maintaining your current healthy eating patterns",
                "Consider adding more variety to your protein sources",
                "Keep up the good work with hydration",
            ),
        ),
        AdvisoryBand(
            name="good",
            min_score=6,
            content=(
                "Good! You have a generally healthy diet with room for improvement. "
                "Your eating habits show some positive patterns that can be enhanced."
            ),
            recommendations=(
                "Increase daily fruit consumption to at least 2 servings",
                "Aim for 3-5 servings of vegetables daily",
                "Ensure adequate water intake (7-8 glasses per day)",
            ),
        ),
        AdvisoryBand(
            name="fair",
            min_score=4,
            content=(
                "Fair. Your current eating habits could benefit from some "
                "adjustments to improve nutritional intake and overall health."
            ),
            recommendations=(
                "Start with small changes to increase fruit and vegetable intake",
                "Gradually increase water consumption",
                "Consider meal planning for better nutrition",
            ),
        ),
        AdvisoryBand(
            name="needs_attention",
            min_score=AdvisoryScorer.MIN_SCORE,
            content=(
                "Your current eating habits may need attention to improve "
                "nutritional intake and overall health. Small changes can make "
                "a big difference."
            ),
            recommendations=(
                "Consult with a nutritionist for personalized advice",
                "Begin with one healthy change per week",
                "Focus on increasing whole foods and reducing processed foods",
            ),
        ),
    )

    def band_for(self, score: int) -> AdvisoryBand:
        for band in self.BANDS:
            if score >= band.min_score:
                return band
        # Below every threshold only if a caller bypassed the scorer's clamp.
        return self.BANDS[-1]

    def compose(self, participant_name: str, score: int) -> ComposedAdvisory:
        band = self.band_for(score)
        return ComposedAdvisory(
            title=f"{self.TITLE_PREFIX}{participant_name}",
            content=band.content,
            recommendations=self.RECOMMENDATION_SEPARATOR.join(band.recommendations),
            health_score=score,
            band=band.name,
        )


# ──────────────────────────────────────────────────────────────────────────────
# AdvisoryService — persistence around the pure scorer/composer
# ──────────────────────────────────────────────────────────────────────────────


class AdvisoryService:
    """Generates, stores and manages advisories for participants.

    The scorer and composer are injected so tests can swap either one.
    Every method takes the caller's ``AsyncSession``; commit/rollback is
    left to the session owner.
    """

    def __init__(
        self,
        scorer: AdvisoryScorer | None = None,
        composer: AdvisoryComposer | None = None,
    ) -> None:
        self.scorer = scorer or AdvisoryScorer()
        self.composer = composer or AdvisoryComposer()

    async def load_participant_answers(
        self,
        participant_id: uuid.UUID,
        db_session: AsyncSession,
    ) -> tuple[Participant, list[AnsweredQuestion]]:
        """Fetch the participant and their answers ordered by question order.

        Raises ``LookupError`` when the participant does not exist.
        """
        participant = await db_session.get(Participant, participant_id)
        if participant is None:
            raise LookupError(f"Participant {participant_id} not found.")

        stmt = (
            select(Response)
            .join(Question, Response.question_id == Question.id)
            .options(selectinload(Response.question))
            .where(Response.participant_id == participant_id)
            .order_by(Question.order, Response.created_at)
        )
        result = await db_session.execute(stmt)
        return participant, to_answered(result.scalars().all())

    async def generate(
        self,
        participant_id: uuid.UUID,
        db_session: AsyncSession,
    ) -> Advisory:
        """Score the participant's answers and persist a new advisory."""
        log = logger.bind(participant_id=str(participant_id))
        log.info("advisory_generate_start")

        participant, answers = await self.load_participant_answers(
            participant_id, db_session
        )

        scored = self.scorer.evaluate(answers)
        composed = self.composer.compose(participant.name, scored.score)
        log.info(
            "advisory_scored",
            n_answers=len(answers),
            health_score=scored.score,
            band=composed.band,
            adjustments=scored.as_dict()["adjustments"],
        )

        advisory = Advisory(
            participant_id=participant.id,
            title=composed.title,
            content=composed.content,
            recommendations=composed.recommendations,
            health_score=composed.health_score,
        )
        db_session.add(advisory)
        await db_session.flush()

        log.info("advisory_generate_complete", advisory_id=str(advisory.id))
        return advisory

    async def list_for_participant(
        self,
        participant_id: uuid.UUID,
        db_session: AsyncSession,
    ) -> list[Advisory]:
        """Advisory history, newest first."""
        stmt = (
            select(Advisory)
            .where(Advisory.participant_id == participant_id)
            .order_by(Advisory.created_at.desc())
        )
        result = await db_session.execute(stmt)
        return list(result.scalars().all())

    async def list_all(
        self,
        db_session: AsyncSession,
        *,
        category: ParticipantCategory | None = None,
        gender: Gender | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Advisory], int]:
        """Every advisory, newest first, filtered by the participant's
        category and gender.  Returns one page plus the filtered total.
        """
        filters = []
        if category is not None:
            filters.append(Participant.category == category)
        if gender is not None:
            filters.append(Participant.gender == gender)

        stmt = (
            select(Advisory)
            .join(Participant, Advisory.participant_id == Participant.id)
            .options(selectinload(Advisory.participant))
            .where(*filters)
            .order_by(Advisory.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        total_stmt = (
            select(func.count(Advisory.id))
            .join(Participant, Advisory.participant_id == Participant.id)
            .where(*filters)
        )

        advisories = list((await db_session.execute(stmt)).scalars().all())
        total = (await db_session.execute(total_stmt)).scalar_one()
        return advisories, total

    async def latest_for_participant(
        self,
        participant_id: uuid.UUID,
        db_session: AsyncSession,
    ) -> Advisory | None:
        stmt = (
            select(Advisory)
            .where(Advisory.participant_id == participant_id)
            .order_by(Advisory.created_at.desc())
            .limit(1)
        )
        result = await db_session.execute(stmt)
        return result.scalar_one_or_none()

    async def get(
        self,
        advisory_id: uuid.UUID,
        db_session: AsyncSession,
    ) -> Advisory:
        advisory = await db_session.get(Advisory, advisory_id)
        if advisory is None:
            raise LookupError(f"Advisory {advisory_id} not found.")
        return advisory

    async def update(
        self,
        advisory_id: uuid.UUID,
        changes: dict,
        db_session: AsyncSession,
    ) -> Advisory:
        """Apply a manual edit.  ``health_score`` is re-checked against [1, 10]."""
        advisory = await self.get(advisory_id, db_session)

        score = changes.get("health_score", advisory.health_score)
        if not AdvisoryScorer.MIN_SCORE <= score <= AdvisoryScorer.MAX_SCORE:
            raise ValueError(f"health_score must be between 1 and 10, got {score}")

        for field_name in ("title", "content", "recommendations", "health_score"):
            if field_name in changes:
                setattr(advisory, field_name, changes[field_name])

        await db_session.flush()
        logger.info("advisory_updated", advisory_id=str(advisory_id))
        return advisory

    async def delete(
        self,
        advisory_id: uuid.UUID,
        db_session: AsyncSession,
    ) -> None:
        advisory = await self.get(advisory_id, db_session)
        await db_session.delete(advisory)
        await db_session.flush()
        logger.info("advisory_deleted", advisory_id=str(advisory_id))
