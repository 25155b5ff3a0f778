"""
Dietwise — Surveys API

Endpoints for listing, authoring, editing and retiring surveys, plus the built-in
default question set used when no survey has been authored yet.
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from dietwise.api.deps import get_survey_service
from dietwise.database import get_db
from dietwise.models import Survey
from dietwise.schemas.survey import SurveyCreate, SurveyResponse
from dietwise.services.errors import ConflictError
from dietwise.services.survey_service import DEFAULT_QUESTIONS, SurveyService

logger = structlog.get_logger("dietwise.api.surveys")

router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# GET / — Active surveys with their questions
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/",
    response_model=list[SurveyResponse],
    summary="List active surveys",
)
async def list_surveys(
    db: AsyncSession = Depends(get_db),
    service: SurveyService = Depends(get_survey_service),
) -> list[Survey]:
    logger.info("list_surveys")
    return await service.list_active(db)


# ──────────────────────────────────────────────────────────────────────────────
# GET /default/questions — Built-in eating-habits question set
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/default/questions",
    summary="Get the default survey questions",
)
async def get_default_questions() -> dict:
    """Return the question set seeded when no survey is active."""
    return {
        "message": "Default survey questions retrieved",
        "questions": [
            {**q, "type": q["type"].value} for q in DEFAULT_QUESTIONS
        ],
    }


# ──────────────────────────────────────────────────────────────────────────────
# GET /{survey_id}
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/{survey_id}",
    response_model=SurveyResponse,
    summary="Get survey by ID",
)
async def get_survey(
    survey_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    service: SurveyService = Depends(get_survey_service),
) -> Survey:
    try:
        return await service.get(survey_id, db)
    except LookupError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc


# ──────────────────────────────────────────────────────────────────────────────
# POST / — Create a survey with its questions
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/",
    response_model=SurveyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a survey",
)
async def create_survey(
    payload: SurveyCreate,
    db: AsyncSession = Depends(get_db),
    service: SurveyService = Depends(get_survey_service),
) -> Survey:
    log = logger.bind(title=payload.title, n_questions=len(payload.questions))
    log.info("create_survey_start")

    try:
        survey = await service.create(
            title=payload.title,
            description=payload.description,
            questions=[q.model_dump() for q in payload.questions],
            db_session=db,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    log.info("create_survey_complete", survey_id=str(survey.id))
    return survey


# ──────────────────────────────────────────────────────────────────────────────
# PUT /{survey_id} — Replace title, description and questions
# ──────────────────────────────────────────────────────────────────────────────

@router.put(
    "/{survey_id}",
    response_model=SurveyResponse,
    summary="Update a survey",
)
async def update_survey(
    survey_id: uuid.UUID,
    payload: SurveyCreate,
    db: AsyncSession = Depends(get_db),
    service: SurveyService = Depends(get_survey_service),
) -> Survey:
    log = logger.bind(survey_id=str(survey_id), n_questions=len(payload.questions))
    log.info("update_survey_start")

    try:
        survey = await service.update(
            survey_id,
            title=payload.title,
            description=payload.description,
            questions=[q.model_dump() for q in payload.questions],
            db_session=db,
        )
    except LookupError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except ConflictError as exc:
        log.warning("update_survey_conflict", reason=str(exc))
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    log.info("update_survey_complete")
    return survey


# ──────────────────────────────────────────────────────────────────────────────
# DELETE /{survey_id} — Soft delete
# ──────────────────────────────────────────────────────────────────────────────

@router.delete(
    "/{survey_id}",
    summary="Deactivate a survey",
)
async def delete_survey(
    survey_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    service: SurveyService = Depends(get_survey_service),
) -> dict:
    try:
        await service.deactivate(survey_id, db)
    except LookupError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc

    return {"message": "Survey deleted successfully"}
