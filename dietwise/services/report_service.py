"""
Dietwise — Comprehensive Health Report

Merges three sources into one JSON-ready report:

  participant       demographic snapshot
  responses         survey summary + dietary answers (first-match lookup)
  latest advisory   health score and recommendations, with fixed fallbacks

``ReportAggregator`` is pure and assumes the participant exists;
``ReportService`` loads the inputs and raises ``LookupError`` for an
unknown participant before aggregation is attempted.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from dietwise.models import Advisory, Participant
from dietwise.services.advisory_service import AdvisoryService
from dietwise.services.answer_lookup import (
    FRUIT_KEYWORD,
    MEAL_PATTERN_KEYWORD,
    VEGETABLE_KEYWORD,
    WATER_KEYWORD,
    AnsweredQuestion,
    find_answer,
    to_answered,
)

logger = structlog.get_logger("dietwise.report_service")

NOT_SPECIFIED = "Not specified"
DEFAULT_HEALTH_SCORE = 5
DEFAULT_RECOMMENDATIONS = "No specific recommendations available"

# report key -> question-text keyword
_DIETARY_FIELDS: dict[str, str] = {
    "fruit_intake": FRUIT_KEYWORD,
    "vegetable_intake": VEGETABLE_KEYWORD,
    "water_intake": WATER_KEYWORD,
    "meal_pattern": MEAL_PATTERN_KEYWORD,
}


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


class ReportAggregator:
    """Builds the comprehensive report dict from already-loaded inputs."""

    def aggregate(
        self,
        participant: Participant,
        responses: Sequence[AnsweredQuestion],
        latest_advisory: Advisory | None,
        now: datetime | None = None,
    ) -> dict:
        now = now or datetime.now(timezone.utc)
        answers = to_answered(responses)

        timestamps = [_as_utc(a.created_at) for a in answers if a.created_at]
        completed_at = min(timestamps) if timestamps else now

        dietary_analysis: dict[str, str] = {}
        for key, keyword in _DIETARY_FIELDS.items():
            match = find_answer(answers, keyword)
            # An empty stored answer is reported the same as a missing one.
            dietary_analysis[key] = (match.answer if match else "") or NOT_SPECIFIED

        if latest_advisory is not None:
            health_score = latest_advisory.health_score or DEFAULT_HEALTH_SCORE
            recommendations = latest_advisory.recommendations or DEFAULT_RECOMMENDATIONS
        else:
            health_score = DEFAULT_HEALTH_SCORE
            recommendations = DEFAULT_RECOMMENDATIONS

        return {
            "participant": {
                "name": participant.name,
                "category": _enum_value(participant.category),
                "gender": _enum_value(participant.gender),
                "age": participant.age,
                "department": participant.department,
            },
            "survey_summary": {
                "total_questions": len(answers),
                "completed_at": completed_at.isoformat(),
            },
            "dietary_analysis": dietary_analysis,
            "health_score": health_score,
            "recommendations": recommendations,
            "generated_at": now.isoformat(),
        }


class ReportService:
    """Loads a participant's data and runs the aggregator."""

    def __init__(
        self,
        advisory_service: AdvisoryService | None = None,
        aggregator: ReportAggregator | None = None,
    ) -> None:
        self.advisory_service = advisory_service or AdvisoryService()
        self.aggregator = aggregator or ReportAggregator()

    async def build_report(
        self,
        participant_id: uuid.UUID,
        db_session: AsyncSession,
    ) -> dict:
        log = logger.bind(participant_id=str(participant_id))
        log.info("report_build_start")

        participant, answers = await self.advisory_service.load_participant_answers(
            participant_id, db_session
        )
        latest = await self.advisory_service.latest_for_participant(
            participant_id, db_session
        )

        report = self.aggregator.aggregate(participant, answers, latest)
        log.info(
            "report_build_complete",
            total_questions=report["survey_summary"]["total_questions"],
            has_advisory=latest is not None,
        )
        return report
