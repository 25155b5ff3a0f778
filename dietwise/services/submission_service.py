"""
Dietwise — Survey Submission Gate

A participant may submit each survey exactly once.  A submission is one
unit of work: a ``Submission`` marker row plus one ``Response`` row per
answered question, flushed together.  If anything fails, including a
unique-constraint violation from a concurrent duplicate, the session is
rolled back and none of the rows remain.

Two layers guard against duplicates:
  1. ``can_submit`` looks for existing rows and yields a friendly error.
  2. ``uq_participant_survey`` / ``uq_participant_question`` reject the
     insert when two requests pass step 1 at the same time.
"""

from __future__ import annotations

import uuid
from typing import Mapping, Sequence

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from dietwise.models import Participant, Question, Response, Submission, Survey
from dietwise.services.errors import DuplicateSubmissionError
from dietwise.services.participant_service import ParticipantService
from dietwise.services.survey_service import SurveyService

logger = structlog.get_logger("dietwise.submission_service")


class SubmissionService:
    """Enforces one-time submission and writes answer sets atomically."""

    def __init__(
        self,
        survey_service: SurveyService | None = None,
        participant_service: ParticipantService | None = None,
    ) -> None:
        self.survey_service = survey_service or SurveyService()
        self.participant_service = participant_service or ParticipantService()

    # ══════════════════════════════════════════════════════════════════════
    # Gate
    # ══════════════════════════════════════════════════════════════════════

    async def can_submit(
        self,
        participant_id: uuid.UUID,
        survey_id: uuid.UUID,
        db_session: AsyncSession,
    ) -> bool:
        """False once any response or submission exists for the pair."""
        return not await self._already_submitted(participant_id, survey_id, db_session)

    @staticmethod
    async def _already_submitted(
        participant_id: uuid.UUID,
        survey_id: uuid.UUID,
        db_session: AsyncSession,
    ) -> bool:
        submission_stmt = (
            select(Submission.id)
            .where(
                Submission.participant_id == participant_id,
                Submission.survey_id == survey_id,
            )
            .limit(1)
        )
        if (await db_session.execute(submission_stmt)).first() is not None:
            return True

        response_stmt = (
            select(Response.id)
            .where(
                Response.participant_id == participant_id,
                Response.survey_id == survey_id,
            )
            .limit(1)
        )
        return (await db_session.execute(response_stmt)).first() is not None

    # ══════════════════════════════════════════════════════════════════════
    # Submit answers for an existing participant
    # ══════════════════════════════════════════════════════════════════════

    async def submit(
        self,
        participant_id: uuid.UUID,
        survey_id: uuid.UUID,
        answers: Sequence[Mapping],
        db_session: AsyncSession,
    ) -> list[Response]:
        """Store ``answers`` (``{"question_id", "answer"}`` items) for the pair.

        Raises
        ------
        LookupError
            Unknown participant, or unknown / inactive survey.
        DuplicateSubmissionError
            The participant already submitted this survey.
        ValueError
            An answer targets a question outside the survey, a question is
            answered twice, or a required question is left blank.
        """
        log = logger.bind(
            participant_id=str(participant_id),
            survey_id=str(survey_id),
            n_answers=len(answers),
        )
        log.info("submission_start")

        survey = await self.survey_service.get(
            survey_id, db_session, active_only=True
        )
        participant = await self.participant_service.get(participant_id, db_session)

        if not await self.can_submit(participant.id, survey.id, db_session):
            log.warning("submission_duplicate_rejected")
            raise DuplicateSubmissionError(
                "Participant has already submitted this survey."
            )

        by_question = self._validate_answers(survey, answers)
        responses = await self._persist(participant, survey, by_question, db_session, log)
        log.info("submission_complete", n_responses=len(responses))
        return responses

    # ══════════════════════════════════════════════════════════════════════
    # Register + submit in one request
    # ══════════════════════════════════════════════════════════════════════

    async def register_and_submit(
        self,
        participant_data: dict,
        answers_by_order: Mapping[int, str | None],
        db_session: AsyncSession,
    ) -> tuple[Participant, Survey, list[Response]]:
        """Create the participant and store their answers to the active survey.

        ``answers_by_order`` maps question order (1..N) to the answer text.
        The default eating-habits survey is seeded if no survey is active.
        Unanswered optional questions are stored as ``""``.
        """
        log = logger.bind(email=participant_data.get("email"))
        log.info("register_and_submit_start")

        participant = await self.participant_service.create(participant_data, db_session)
        survey = await self.survey_service.get_or_create_default(db_session)

        answers: list[dict] = []
        for question in survey.questions:
            text = answers_by_order.get(question.order)
            if not question.required and not (text or "").strip():
                text = ""
            answers.append({"question_id": question.id, "answer": text})

        by_question = self._validate_answers(survey, answers)
        responses = await self._persist(participant, survey, by_question, db_session, log)

        log.info(
            "register_and_submit_complete",
            participant_id=str(participant.id),
            survey_id=str(survey.id),
            n_responses=len(responses),
        )
        return participant, survey, responses

    # ══════════════════════════════════════════════════════════════════════
    # Stored responses
    # ══════════════════════════════════════════════════════════════════════

    async def list_for_survey(
        self,
        survey_id: uuid.UUID,
        db_session: AsyncSession,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Response], int]:
        """One page of a survey's responses with respondent and question loaded.

        Ordered by respondent name, then question order.
        """
        stmt = (
            select(Response)
            .join(Participant, Response.participant_id == Participant.id)
            .join(Question, Response.question_id == Question.id)
            .options(
                selectinload(Response.participant),
                selectinload(Response.question),
            )
            .where(Response.survey_id == survey_id)
            .order_by(Participant.name, Participant.id, Question.order)
            .limit(limit)
            .offset(offset)
        )
        total_stmt = select(func.count(Response.id)).where(
            Response.survey_id == survey_id
        )

        responses = list((await db_session.execute(stmt)).scalars().all())
        total = (await db_session.execute(total_stmt)).scalar_one()
        return responses, total

    async def delete_response(
        self,
        response_id: uuid.UUID,
        db_session: AsyncSession,
    ) -> None:
        """Delete one stored answer.

        The submission marker tracks the remaining count; removing the last
        answer for the pair removes the marker too, which reopens the gate.
        """
        response = await db_session.get(Response, response_id)
        if response is None:
            raise LookupError(f"Response {response_id} not found.")

        participant_id, survey_id = response.participant_id, response.survey_id
        log = logger.bind(
            response_id=str(response_id),
            participant_id=str(participant_id),
            survey_id=str(survey_id),
        )

        await db_session.delete(response)
        await db_session.flush()

        marker_stmt = select(Submission).where(
            Submission.participant_id == participant_id,
            Submission.survey_id == survey_id,
        )
        marker = (await db_session.execute(marker_stmt)).scalar_one_or_none()
        if marker is not None:
            remaining_stmt = select(func.count(Response.id)).where(
                Response.participant_id == participant_id,
                Response.survey_id == survey_id,
            )
            remaining = (await db_session.execute(remaining_stmt)).scalar_one()
            if remaining == 0:
                await db_session.delete(marker)
                log.info("submission_marker_removed")
            else:
                marker.response_count = remaining
            await db_session.flush()

        log.info("response_deleted")

    # ── Internals ─────────────────────────────────────────────────────────

    @staticmethod
    def _validate_answers(
        survey: Survey,
        answers: Sequence[Mapping],
    ) -> dict[uuid.UUID, str]:
        questions: dict[uuid.UUID, Question] = {q.id: q for q in survey.questions}
        by_question: dict[uuid.UUID, str] = {}

        for item in answers:
            question_id = item["question_id"]
            if isinstance(question_id, str):
                question_id = uuid.UUID(question_id)
            if question_id not in questions:
                raise ValueError(
                    f"Question {question_id} does not belong to survey {survey.id}."
                )
            if question_id in by_question:
                raise ValueError(f"Question {question_id} answered more than once.")
            by_question[question_id] = "" if item.get("answer") is None else str(item["answer"])

        missing = [
            q.order
            for q in survey.questions
            if q.required and not by_question.get(q.id, "").strip()
        ]
        if missing:
            raise ValueError(
                "Required questions not answered: "
                + ", ".join(f"Question {n}" for n in missing)
            )
        return by_question

    @staticmethod
    async def _persist(
        participant: Participant,
        survey: Survey,
        by_question: dict[uuid.UUID, str],
        db_session: AsyncSession,
        log,
    ) -> list[Response]:
        # Keep the survey's question order for the inserted rows.
        responses = [
            Response(
                participant_id=participant.id,
                question_id=q.id,
                survey_id=survey.id,
                answer=by_question[q.id],
            )
            for q in survey.questions
            if q.id in by_question
        ]
        db_session.add(
            Submission(
                participant_id=participant.id,
                survey_id=survey.id,
                response_count=len(responses),
            )
        )
        db_session.add_all(responses)

        # Rollback expires loaded instances; keep the keys for the re-check.
        participant_id, survey_id = participant.id, survey.id
        try:
            await db_session.flush()
        except IntegrityError as exc:
            await db_session.rollback()
            # Only a row that now exists for the pair makes this a duplicate;
            # any other integrity failure propagates unchanged.
            if not await SubmissionService._already_submitted(
                participant_id, survey_id, db_session
            ):
                log.error("submission_integrity_error", error=str(exc.orig))
                raise
            log.warning("submission_duplicate_race_rejected")
            raise DuplicateSubmissionError(
                "Participant has already submitted this survey."
            ) from exc

        return responses
