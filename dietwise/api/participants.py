"""
Dietwise — Participants API

Endpoints for participant registration, lookup, editing and removal.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from dietwise.api.deps import get_participant_service
from dietwise.config import get_settings
from dietwise.database import get_db
from dietwise.models import Gender, Participant, ParticipantCategory
from dietwise.schemas.participant import (
    ParticipantCreate,
    ParticipantPage,
    ParticipantResponse,
    ParticipantUpdate,
)
from dietwise.services.errors import ConflictError
from dietwise.services.participant_service import ParticipantService

logger = structlog.get_logger("dietwise.api.participants")

router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# POST / — Create a new participant
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/",
    response_model=ParticipantResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new participant",
)
async def create_participant(
    payload: ParticipantCreate,
    db: AsyncSession = Depends(get_db),
    service: ParticipantService = Depends(get_participant_service),
) -> Participant:
    """Register a participant.  Emails must be unique."""
    log = logger.bind(email=payload.email)
    log.info("create_participant_start")

    try:
        participant = await service.create(payload.model_dump(), db)
    except ConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc

    log.info("create_participant_complete", participant_id=str(participant.id))
    return participant


# ──────────────────────────────────────────────────────────────────────────────
# GET / — List participants with filters + pagination
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/",
    response_model=ParticipantPage,
    summary="List participants",
)
async def list_participants(
    category: Optional[ParticipantCategory] = Query(None),
    gender: Optional[Gender] = Query(None),
    department: Optional[str] = Query(None, description="Substring match"),
    limit: Optional[int] = Query(None, ge=1, description="Max participants to return"),
    offset: int = Query(0, ge=0, description="Number of participants to skip"),
    db: AsyncSession = Depends(get_db),
    service: ParticipantService = Depends(get_participant_service),
) -> ParticipantPage:
    settings = get_settings()
    limit = min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
    logger.info("list_participants", limit=limit, offset=offset)

    participants, total = await service.list_participants(
        db,
        category=category,
        gender=gender,
        department=department,
        limit=limit,
        offset=offset,
    )
    return ParticipantPage(
        participants=[ParticipantResponse.model_validate(p) for p in participants],
        total=total,
        limit=limit,
        offset=offset,
    )


# ──────────────────────────────────────────────────────────────────────────────
# GET /{participant_id}
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/{participant_id}",
    response_model=ParticipantResponse,
    summary="Get participant by ID",
)
async def get_participant(
    participant_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    service: ParticipantService = Depends(get_participant_service),
) -> Participant:
    try:
        return await service.get(participant_id, db)
    except LookupError as exc:
        logger.warning("get_participant_not_found", participant_id=str(participant_id))
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc


# ──────────────────────────────────────────────────────────────────────────────
# PUT /{participant_id}
# ──────────────────────────────────────────────────────────────────────────────

@router.put(
    "/{participant_id}",
    response_model=ParticipantResponse,
    summary="Update participant details",
)
async def update_participant(
    participant_id: uuid.UUID,
    payload: ParticipantUpdate,
    db: AsyncSession = Depends(get_db),
    service: ParticipantService = Depends(get_participant_service),
) -> Participant:
    log = logger.bind(participant_id=str(participant_id))
    log.info("update_participant_start")

    try:
        participant = await service.update(participant_id, payload.model_dump(), db)
    except LookupError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except ConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc

    log.info("update_participant_complete")
    return participant


# ──────────────────────────────────────────────────────────────────────────────
# DELETE /{participant_id}
# ──────────────────────────────────────────────────────────────────────────────

@router.delete(
    "/{participant_id}",
    summary="Delete a participant without responses",
)
async def delete_participant(
    participant_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    service: ParticipantService = Depends(get_participant_service),
) -> dict:
    try:
        await service.delete(participant_id, db)
    except LookupError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except ConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc

    return {"message": "Participant deleted successfully"}
