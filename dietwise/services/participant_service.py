"""
Dietwise — Participant registry.

CRUD over the ``participants`` table.  Email addresses are unique; a
participant who already has stored responses cannot be deleted.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from dietwise.models import Gender, Participant, ParticipantCategory, Response
from dietwise.services.errors import ConflictError, DuplicateParticipantError

logger = structlog.get_logger("dietwise.participant_service")

_EDITABLE_FIELDS = (
    "email",
    "name",
    "category",
    "gender",
    "age",
    "department",
    "student_id",
    "staff_id",
)


class ParticipantService:

    async def get(
        self,
        participant_id: uuid.UUID,
        db_session: AsyncSession,
    ) -> Participant:
        participant = await db_session.get(Participant, participant_id)
        if participant is None:
            raise LookupError(f"Participant {participant_id} not found.")
        return participant

    async def get_by_email(
        self,
        email: str,
        db_session: AsyncSession,
    ) -> Participant | None:
        stmt = select(Participant).where(Participant.email == email)
        result = await db_session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(
        self,
        data: dict,
        db_session: AsyncSession,
    ) -> Participant:
        """Register a participant.  Raises ``DuplicateParticipantError``."""
        log = logger.bind(email=data.get("email"))

        if await self.get_by_email(data["email"], db_session) is not None:
            log.warning("participant_duplicate_email")
            raise DuplicateParticipantError(
                "Participant with this email already exists."
            )

        participant = Participant(
            **{k: data.get(k) for k in _EDITABLE_FIELDS}
        )
        db_session.add(participant)
        try:
            await db_session.flush()
        except IntegrityError as exc:
            await db_session.rollback()
            log.warning("participant_duplicate_email_race")
            raise DuplicateParticipantError(
                "Participant with this email already exists."
            ) from exc

        log.info("participant_created", participant_id=str(participant.id))
        return participant

    async def update(
        self,
        participant_id: uuid.UUID,
        changes: dict,
        db_session: AsyncSession,
    ) -> Participant:
        participant = await self.get(participant_id, db_session)

        new_email = changes.get("email")
        if new_email and new_email != participant.email:
            if await self.get_by_email(new_email, db_session) is not None:
                raise DuplicateParticipantError(
                    "Email is already taken by another participant."
                )

        for field_name in _EDITABLE_FIELDS:
            if field_name in changes:
                setattr(participant, field_name, changes[field_name])

        try:
            await db_session.flush()
        except IntegrityError as exc:
            await db_session.rollback()
            logger.warning(
                "participant_duplicate_email_race",
                participant_id=str(participant_id),
            )
            raise DuplicateParticipantError(
                "Email is already taken by another participant."
            ) from exc

        logger.info("participant_updated", participant_id=str(participant_id))
        return participant

    async def delete(
        self,
        participant_id: uuid.UUID,
        db_session: AsyncSession,
    ) -> None:
        participant = await self.get(participant_id, db_session)

        count_stmt = select(func.count(Response.id)).where(
            Response.participant_id == participant_id
        )
        if (await db_session.execute(count_stmt)).scalar_one() > 0:
            raise ConflictError(
                "Cannot delete participant with existing survey responses."
            )

        await db_session.delete(participant)
        await db_session.flush()
        logger.info("participant_deleted", participant_id=str(participant_id))

    async def list_participants(
        self,
        db_session: AsyncSession,
        *,
        category: ParticipantCategory | None = None,
        gender: Gender | None = None,
        department: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Participant], int]:
        """Return one page of participants ordered by name, plus the total."""
        filters = []
        if category is not None:
            filters.append(Participant.category == category)
        if gender is not None:
            filters.append(Participant.gender == gender)
        if department:
            filters.append(Participant.department.contains(department))

        stmt = (
            select(Participant)
            .where(*filters)
            .order_by(Participant.name)
            .limit(limit)
            .offset(offset)
        )
        total_stmt = select(func.count(Participant.id)).where(*filters)

        participants = list((await db_session.execute(stmt)).scalars().all())
        total = (await db_session.execute(total_stmt)).scalar_one()
        return participants, total
