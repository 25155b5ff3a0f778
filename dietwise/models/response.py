"""
Dietwise — Response models (per-question answers + one-per-survey submission marker).
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dietwise.database import Base, utcnow


class Response(Base):
    __tablename__ = "responses"
    __table_args__ = (
        UniqueConstraint(
            "participant_id", "question_id", name="uq_participant_question"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    participant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("participants.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False
    )
    survey_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False
    )
    answer: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    # ── Relationships ──────────────────────────────────────────────
    participant: Mapped["Participant"] = relationship(
        "Participant", back_populates="responses"
    )
    question: Mapped["Question"] = relationship("Question")

    def __repr__(self) -> str:
        return (
            f"<Response participant={self.participant_id} "
            f"question={self.question_id}>"
        )


class Submission(Base):
    """One row per completed (participant, survey) answer set.

    The unique constraint is what stops two concurrent submissions from
    both landing; the pre-insert lookup only produces the friendly error.
    """

    __tablename__ = "submissions"
    __table_args__ = (
        UniqueConstraint(
            "participant_id", "survey_id", name="uq_participant_survey"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    participant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False
    )
    survey_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False
    )
    response_count: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    # ── Relationships ──────────────────────────────────────────────
    participant: Mapped["Participant"] = relationship(
        "Participant", back_populates="submissions"
    )

    def __repr__(self) -> str:
        return (
            f"<Submission participant={self.participant_id} "
            f"survey={self.survey_id} n={self.response_count}>"
        )
