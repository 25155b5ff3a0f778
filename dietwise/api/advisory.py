"""
Dietwise — Advisory API

Generates scored health advisories from a participant's survey answers,
exposes the advisory history for manual review and edits, and builds the
combined health report.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from dietwise.api.deps import get_advisory_service, get_report_service
from dietwise.config import get_settings
from dietwise.database import get_db
from dietwise.models import Advisory, Gender, ParticipantCategory
from dietwise.schemas.advisory import (
    AdvisoryHistory,
    AdvisoryListItem,
    AdvisoryPage,
    AdvisoryResponse,
    AdvisoryUpdate,
    GeneratedAdvisory,
)
from dietwise.schemas.report import HealthReport, HealthReportEnvelope
from dietwise.services.advisory_service import AdvisoryService
from dietwise.services.report_service import ReportService

logger = structlog.get_logger("dietwise.api.advisory")

router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# POST /generate/{participant_id}
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/generate/{participant_id}",
    response_model=GeneratedAdvisory,
    status_code=status.HTTP_201_CREATED,
    summary="Generate a health advisory from survey answers",
)
async def generate_advisory(
    participant_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    service: AdvisoryService = Depends(get_advisory_service),
) -> GeneratedAdvisory:
    """
    Score the participant's stored answers and persist a new advisory.

    Participants without answers still receive an advisory at the
    baseline score.
    """
    try:
        advisory = await service.generate(participant_id, db)
    except LookupError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc

    band = service.composer.band_for(advisory.health_score)
    return GeneratedAdvisory(
        message="Health advisory generated successfully",
        advisory=AdvisoryResponse.model_validate(advisory),
        band=band.name,
    )


# ──────────────────────────────────────────────────────────────────────────────
# GET / — All advisories for review, newest first
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/",
    response_model=AdvisoryPage,
    summary="List all advisories",
)
async def list_advisories(
    category: Optional[ParticipantCategory] = Query(None, description="Filter by participant category"),
    gender: Optional[Gender] = Query(None, description="Filter by participant gender"),
    limit: Optional[int] = Query(None, ge=1, description="Max advisories to return"),
    offset: int = Query(0, ge=0, description="Number of advisories to skip"),
    db: AsyncSession = Depends(get_db),
    service: AdvisoryService = Depends(get_advisory_service),
) -> AdvisoryPage:
    settings = get_settings()
    limit = min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
    logger.info("list_advisories", limit=limit, offset=offset)

    advisories, total = await service.list_all(
        db,
        category=category,
        gender=gender,
        limit=limit,
        offset=offset,
    )
    return AdvisoryPage(
        advisories=[AdvisoryListItem.model_validate(a) for a in advisories],
        total=total,
        limit=limit,
        offset=offset,
    )


# ──────────────────────────────────────────────────────────────────────────────
# GET /participant/{participant_id} — History, newest first
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/participant/{participant_id}",
    response_model=AdvisoryHistory,
    summary="List a participant's advisories",
)
async def list_participant_advisories(
    participant_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    service: AdvisoryService = Depends(get_advisory_service),
) -> AdvisoryHistory:
    advisories = await service.list_for_participant(participant_id, db)
    return AdvisoryHistory(
        advisories=[AdvisoryResponse.model_validate(a) for a in advisories],
        total=len(advisories),
    )


# ──────────────────────────────────────────────────────────────────────────────
# GET /{advisory_id}
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/{advisory_id}",
    response_model=AdvisoryResponse,
    summary="Get advisory by ID",
)
async def get_advisory(
    advisory_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    service: AdvisoryService = Depends(get_advisory_service),
) -> Advisory:
    try:
        return await service.get(advisory_id, db)
    except LookupError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc


# ──────────────────────────────────────────────────────────────────────────────
# PUT /{advisory_id} — Manual edit
# ──────────────────────────────────────────────────────────────────────────────

@router.put(
    "/{advisory_id}",
    response_model=AdvisoryResponse,
    summary="Edit an advisory",
)
async def update_advisory(
    advisory_id: uuid.UUID,
    payload: AdvisoryUpdate,
    db: AsyncSession = Depends(get_db),
    service: AdvisoryService = Depends(get_advisory_service),
) -> Advisory:
    log = logger.bind(advisory_id=str(advisory_id))
    log.info("update_advisory_start")

    try:
        advisory = await service.update(advisory_id, payload.model_dump(), db)
    except LookupError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    return advisory


# ──────────────────────────────────────────────────────────────────────────────
# DELETE /{advisory_id}
# ──────────────────────────────────────────────────────────────────────────────

@router.delete(
    "/{advisory_id}",
    summary="Delete an advisory",
)
async def delete_advisory(
    advisory_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    service: AdvisoryService = Depends(get_advisory_service),
) -> dict:
    try:
        await service.delete(advisory_id, db)
    except LookupError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc

    return {"message": "Advisory deleted successfully"}


# ──────────────────────────────────────────────────────────────────────────────
# POST /report/{participant_id} — Combined health report
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/report/{participant_id}",
    response_model=HealthReportEnvelope,
    summary="Build a participant's health report",
)
async def generate_report(
    participant_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    service: ReportService = Depends(get_report_service),
) -> HealthReportEnvelope:
    try:
        report = await service.build_report(participant_id, db)
    except LookupError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc

    return HealthReportEnvelope(
        message="Health report generated successfully",
        report=HealthReport.model_validate(report),
    )
