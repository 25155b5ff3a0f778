"""
Dietwise — Participant model (survey respondent demographics).
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dietwise.database import Base, utcnow


class ParticipantCategory(str, enum.Enum):
    TEACHING_STAFF = "TEACHING_STAFF"
    NON_TEACHING_STAFF = "NON_TEACHING_STAFF"
    STUDENT = "STUDENT"


class Gender(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


class Participant(Base):
    __tablename__ = "participants"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    email: Mapped[str] = mapped_column(
        String, unique=True, index=True, nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    category: Mapped[ParticipantCategory] = mapped_column(
        Enum(ParticipantCategory, name="participant_category"), nullable=False
    )
    gender: Mapped[Gender] = mapped_column(
        Enum(Gender, name="participant_gender"), nullable=False
    )
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    department: Mapped[str | None] = mapped_column(String, nullable=True)
    student_id: Mapped[str | None] = mapped_column(String, nullable=True)
    staff_id: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    # ── Relationships ──────────────────────────────────────────────
    responses: Mapped[list["Response"]] = relationship(
        "Response",
        back_populates="participant",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    submissions: Mapped[list["Submission"]] = relationship(
        "Submission",
        back_populates="participant",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    advisories: Mapped[list["Advisory"]] = relationship(
        "Advisory",
        back_populates="participant",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Participant {self.email!r} id={self.id}>"
