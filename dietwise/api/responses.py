"""
Dietwise — Responses API

Submitting an answer set goes through the submission gate: one set per
participant per survey, written atomically.  Stored answers can be listed
per participant or per survey, and deleted one at a time.  Also exposes the
registration-plus-answers form used by the public survey page.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from dietwise.api.deps import get_submission_service
from dietwise.config import get_settings
from dietwise.database import get_db
from dietwise.models import Question, Response
from dietwise.schemas.response import (
    CanSubmitResponse,
    ParticipantAnswer,
    ResponseSubmit,
    StoredResponse,
    StoredResponsePage,
    SubmissionResult,
    SurveyFormSubmit,
)
from dietwise.services.errors import ConflictError
from dietwise.services.submission_service import SubmissionService

logger = structlog.get_logger("dietwise.api.responses")

router = APIRouter()
form_router = APIRouter()


def _raise_for(exc: Exception) -> None:
    """Translate a service-layer error into the matching HTTP status."""
    if isinstance(exc, LookupError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ConflictError):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    raise HTTPException(status_code=code, detail=str(exc)) from exc


# ──────────────────────────────────────────────────────────────────────────────
# POST / — Submit an answer set for an existing participant
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/",
    response_model=SubmissionResult,
    status_code=status.HTTP_201_CREATED,
    summary="Submit survey responses",
)
async def submit_responses(
    payload: ResponseSubmit,
    db: AsyncSession = Depends(get_db),
    service: SubmissionService = Depends(get_submission_service),
) -> SubmissionResult:
    log = logger.bind(
        participant_id=str(payload.participant_id),
        survey_id=str(payload.survey_id),
    )
    log.info("submit_responses_start")

    try:
        stored = await service.submit(
            participant_id=payload.participant_id,
            survey_id=payload.survey_id,
            answers=[item.model_dump() for item in payload.responses],
            db_session=db,
        )
    except (LookupError, ValueError) as exc:
        log.warning("submit_responses_rejected", reason=str(exc))
        _raise_for(exc)

    return SubmissionResult(
        status="submitted",
        participant_id=payload.participant_id,
        survey_id=payload.survey_id,
        total_responses=len(stored),
    )


# ──────────────────────────────────────────────────────────────────────────────
# GET /can-submit — Gate check
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/can-submit",
    response_model=CanSubmitResponse,
    summary="Check whether a participant may still submit a survey",
)
async def can_submit(
    participant_id: uuid.UUID = Query(...),
    survey_id: uuid.UUID = Query(...),
    db: AsyncSession = Depends(get_db),
    service: SubmissionService = Depends(get_submission_service),
) -> CanSubmitResponse:
    allowed = await service.can_submit(participant_id, survey_id, db)
    return CanSubmitResponse(
        participant_id=participant_id,
        survey_id=survey_id,
        can_submit=allowed,
    )


# ──────────────────────────────────────────────────────────────────────────────
# GET /participant/{participant_id} — A participant's answers
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/participant/{participant_id}",
    summary="Get responses by participant",
)
async def get_participant_responses(
    participant_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> dict:
    stmt = (
        select(Response)
        .join(Question, Response.question_id == Question.id)
        .options(selectinload(Response.question))
        .where(Response.participant_id == participant_id)
        .order_by(Response.survey_id, Question.order)
    )
    result = await db.execute(stmt)
    responses = result.scalars().all()

    answers = [
        ParticipantAnswer(
            question_id=r.question_id,
            question_order=r.question.order,
            question_text=r.question.text,
            answer=r.answer,
            created_at=r.created_at,
        )
        for r in responses
    ]
    return {"responses": answers, "total": len(answers)}


# ──────────────────────────────────────────────────────────────────────────────
# GET /survey/{survey_id} — Every stored answer to a survey, paginated
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/survey/{survey_id}",
    response_model=StoredResponsePage,
    summary="List responses to a survey",
)
async def list_survey_responses(
    survey_id: uuid.UUID,
    limit: Optional[int] = Query(None, ge=1, description="Max responses to return"),
    offset: int = Query(0, ge=0, description="Number of responses to skip"),
    db: AsyncSession = Depends(get_db),
    service: SubmissionService = Depends(get_submission_service),
) -> StoredResponsePage:
    settings = get_settings()
    limit = min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
    logger.info("list_survey_responses", survey_id=str(survey_id), limit=limit, offset=offset)

    responses, total = await service.list_for_survey(
        survey_id, db, limit=limit, offset=offset
    )
    return StoredResponsePage(
        responses=[StoredResponse.model_validate(r) for r in responses],
        total=total,
        limit=limit,
        offset=offset,
    )


# ──────────────────────────────────────────────────────────────────────────────
# DELETE /{response_id}
# ──────────────────────────────────────────────────────────────────────────────

@router.delete(
    "/{response_id}",
    summary="Delete a stored response",
)
async def delete_response(
    response_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    service: SubmissionService = Depends(get_submission_service),
) -> dict:
    try:
        await service.delete_response(response_id, db)
    except LookupError as exc:
        _raise_for(exc)

    return {"message": "Response deleted successfully"}


# ──────────────────────────────────────────────────────────────────────────────
# POST /survey/submit — Register and answer in one request
# ──────────────────────────────────────────────────────────────────────────────

@form_router.post(
    "/submit",
    response_model=SubmissionResult,
    status_code=status.HTTP_201_CREATED,
    summary="Register a participant and submit the active survey",
)
async def submit_survey_form(
    payload: SurveyFormSubmit,
    db: AsyncSession = Depends(get_db),
    service: SubmissionService = Depends(get_submission_service),
) -> SubmissionResult:
    log = logger.bind(email=payload.email)
    log.info("submit_survey_form_start")

    try:
        participant, survey, stored = await service.register_and_submit(
            participant_data=payload.participant_data(),
            answers_by_order=payload.answers_by_order(),
            db_session=db,
        )
    except (LookupError, ValueError) as exc:
        log.warning("submit_survey_form_rejected", reason=str(exc))
        _raise_for(exc)

    return SubmissionResult(
        status="submitted",
        participant_id=participant.id,
        survey_id=survey.id,
        total_responses=len(stored),
    )
