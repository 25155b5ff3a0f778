"""
Dietwise — Advisory model (generated health score + narrative history).
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dietwise.database import Base, utcnow


class Advisory(Base):
    __tablename__ = "advisories"
    __table_args__ = (
        CheckConstraint(
            "health_score BETWEEN 1 AND 10", name="ck_advisory_health_score"
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
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    recommendations: Mapped[str] = mapped_column(Text, nullable=False)
    health_score: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="1-10"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    # ── Relationships ──────────────────────────────────────────────
    participant: Mapped["Participant"] = relationship(
        "Participant", back_populates="advisories"
    )

    def __repr__(self) -> str:
        return (
            f"<Advisory participant={self.participant_id} "
            f"score={self.health_score}>"
        )
