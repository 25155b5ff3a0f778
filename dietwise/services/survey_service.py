"""
Dietwise — Survey authoring and lookup.

Holds the built-in eating-habits question set.  Its question texts carry
the keywords the advisory scorer and report aggregator look for
("fruits", "vegetables", "water", "meal pattern"), so editing them changes
scoring behaviour.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from dietwise.config import get_settings
from dietwise.models import Question, QuestionType, Response, Survey
from dietwise.services.errors import ConflictError

logger = structlog.get_logger("dietwise.survey_service")


DEFAULT_QUESTIONS: list[dict] = [
    {
        "order": 1,
        "text": "What is your typical daily meal pattern?",
        "type": QuestionType.MULTIPLE_CHOICE,
        "options": [
            "3 meals per day",
            "2 meals per day",
            "4+ meals per day",
            "Irregular eating pattern",
        ],
        "required": True,
    },
    {
        "order": 2,
        "text": "How many servings of fruits do you consume daily?",
        "type": QuestionType.NUMBER,
        "options": None,
        "required": True,
    },
    {
        "order": 3,
        "text": "How many servings of vegetables do you consume daily?",
        "type": QuestionType.NUMBER,
        "options": None,
        "required": True,
    },
    {
        "order": 4,
        "text": "Do you consume fast food regularly?",
        "type": QuestionType.YES_NO,
        "options": None,
        "required": True,
    },
    {
        "order": 5,
        "text": "How often do you drink water?",
        "type": QuestionType.MULTIPLE_CHOICE,
        "options": [
            "Less than 4 glasses per day",
            "4-6 glasses per day",
            "7-8 glasses per day",
            "More than 8 glasses per day",
        ],
        "required": True,
    },
    {
        "order": 6,
        "text": "What is your primary source of protein?",
        "type": QuestionType.MULTIPLE_CHOICE,
        "options": [
            "Meat (chicken, beef, pork)",
            "Fish and seafood",
            "Eggs and dairy",
            "Plant-based (beans, lentils, tofu)",
            "Mixed sources",
        ],
        "required": True,
    },
    {
        "order": 7,
        "text": "Do you have any food allergies or intolerances?",
        "type": QuestionType.TEXT,
        "options": None,
        "required": False,
    },
    {
        "order": 8,
        "text": "How would you rate your overall eating habits?",
        "type": QuestionType.SCALE,
        "options": [str(n) for n in range(1, 11)],
        "required": True,
    },
]


def _build_questions(questions: list[dict]) -> list[Question]:
    return [
        Question(
            order=q["order"],
            text=q["text"],
            type=q["type"],
            options=q.get("options"),
            required=q.get("required", True),
        )
        for q in sorted(questions, key=lambda q: q["order"])
    ]


class SurveyService:

    async def list_active(self, db_session: AsyncSession) -> list[Survey]:
        stmt = (
            select(Survey)
            .options(selectinload(Survey.questions))
            .where(Survey.is_active.is_(True))
            .order_by(Survey.created_at.desc())
        )
        result = await db_session.execute(stmt)
        return list(result.scalars().all())

    async def get(
        self,
        survey_id: uuid.UUID,
        db_session: AsyncSession,
        *,
        active_only: bool = False,
    ) -> Survey:
        """Fetch a survey with its ordered questions or raise ``LookupError``."""
        stmt = (
            select(Survey)
            .options(selectinload(Survey.questions))
            .where(Survey.id == survey_id)
        )
        if active_only:
            stmt = stmt.where(Survey.is_active.is_(True))
        survey = (await db_session.execute(stmt)).scalar_one_or_none()

        if survey is None:
            qualifier = "active " if active_only else ""
            raise LookupError(f"No {qualifier}survey with id {survey_id}.")
        return survey

    async def create(
        self,
        title: str,
        description: str | None,
        questions: list[dict],
        db_session: AsyncSession,
    ) -> Survey:
        """Create a survey and all of its questions in one flush."""
        orders = [q["order"] for q in questions]
        if len(orders) != len(set(orders)):
            raise ValueError("Question order values must be unique within a survey.")

        survey = Survey(
            title=title,
            description=description,
            is_active=True,
            questions=_build_questions(questions),
        )
        db_session.add(survey)
        await db_session.flush()

        logger.info(
            "survey_created",
            survey_id=str(survey.id),
            n_questions=len(questions),
        )
        return survey

    async def update(
        self,
        survey_id: uuid.UUID,
        title: str,
        description: str | None,
        questions: list[dict],
        db_session: AsyncSession,
    ) -> Survey:
        """Replace a survey's title, description and full question set.

        Raises ``ConflictError`` once answers exist, since replacing the
        questions would orphan them.
        """
        survey = await self.get(survey_id, db_session)

        orders = [q["order"] for q in questions]
        if len(orders) != len(set(orders)):
            raise ValueError("Question order values must be unique within a survey.")

        answered_stmt = select(func.count(Response.id)).where(
            Response.survey_id == survey_id
        )
        if (await db_session.execute(answered_stmt)).scalar_one() > 0:
            raise ConflictError(
                "Cannot replace the questions of a survey that already has responses."
            )

        survey.title = title
        survey.description = description

        # Old rows must be gone before the new ones reuse their order values.
        survey.questions.clear()
        await db_session.flush()

        survey.questions = _build_questions(questions)
        await db_session.flush()

        logger.info(
            "survey_updated",
            survey_id=str(survey_id),
            n_questions=len(questions),
        )
        return survey

    async def deactivate(
        self,
        survey_id: uuid.UUID,
        db_session: AsyncSession,
    ) -> Survey:
        """Soft delete: responses keep pointing at the survey."""
        survey = await self.get(survey_id, db_session)
        survey.is_active = False
        await db_session.flush()
        logger.info("survey_deactivated", survey_id=str(survey_id))
        return survey

    async def get_or_create_default(self, db_session: AsyncSession) -> Survey:
        """Return the newest active survey, seeding the default one if none exists."""
        stmt = (
            select(Survey)
            .options(selectinload(Survey.questions))
            .where(Survey.is_active.is_(True))
            .order_by(Survey.created_at.desc())
            .limit(1)
        )
        survey = (await db_session.execute(stmt)).scalar_one_or_none()
        if survey is not None:
            return survey

        settings = get_settings()
        logger.info("default_survey_seeding")
        return await self.create(
            title=settings.DEFAULT_SURVEY_TITLE,
            description=settings.DEFAULT_SURVEY_DESCRIPTION,
            questions=DEFAULT_QUESTIONS,
            db_session=db_session,
        )
