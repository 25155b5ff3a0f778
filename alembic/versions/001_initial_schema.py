"""Initial schema — all 6 Dietwise tables.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


participant_category = postgresql.ENUM(
    "TEACHING_STAFF", "NON_TEACHING_STAFF", "STUDENT",
    name="participant_category",
    create_type=False,
)
participant_gender = postgresql.ENUM(
    "MALE", "FEMALE",
    name="participant_gender",
    create_type=False,
)
question_type = postgresql.ENUM(
    "TEXT", "NUMBER", "MULTIPLE_CHOICE", "CHECKBOX", "SCALE", "YES_NO",
    name="question_type",
    create_type=False,
)


def upgrade() -> None:
    bind = op.get_bind()
    participant_category.create(bind, checkfirst=True)
    participant_gender.create(bind, checkfirst=True)
    question_type.create(bind, checkfirst=True)

    # ── 1. participants ─────────────────────────────────────────────
    op.create_table(
        "participants",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String, unique=True, index=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("category", participant_category, nullable=False),
        sa.Column("gender", participant_gender, nullable=False),
        sa.Column("age", sa.Integer, nullable=False),
        sa.Column("department", sa.String, nullable=True),
        sa.Column("student_id", sa.String, nullable=True),
        sa.Column("staff_id", sa.String, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )

    # ── 2. surveys ──────────────────────────────────────────────────
    op.create_table(
        "surveys",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column(
            "is_active",
            sa.Boolean,
            server_default="true",
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )

    # ── 3. questions ────────────────────────────────────────────────
    op.create_table(
        "questions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "survey_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("surveys.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("order", sa.Integer, nullable=False, comment="1..N"),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("type", question_type, nullable=False),
        sa.Column(
            "options",
            sa.JSON,
            nullable=True,
            comment="Array of choice strings",
        ),
        sa.Column(
            "required",
            sa.Boolean,
            server_default="true",
            nullable=False,
        ),
        sa.UniqueConstraint("survey_id", "order", name="uq_survey_question_order"),
    )

    # ── 4. responses ────────────────────────────────────────────────
    op.create_table(
        "responses",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "participant_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("participants.id", ondelete="CASCADE"),
            index=True,
            nullable=False,
        ),
        sa.Column(
            "question_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("questions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "survey_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("surveys.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("answer", sa.Text, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint(
            "participant_id", "question_id", name="uq_participant_question"
        ),
    )

    # ── 5. submissions ──────────────────────────────────────────────
    op.create_table(
        "submissions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "participant_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("participants.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "survey_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("surveys.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("response_count", sa.Integer, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint(
            "participant_id", "survey_id", name="uq_participant_survey"
        ),
    )

    # ── 6. advisories ───────────────────────────────────────────────
    op.create_table(
        "advisories",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "participant_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("participants.id", ondelete="CASCADE"),
            index=True,
            nullable=False,
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("recommendations", sa.Text, nullable=False),
        sa.Column("health_score", sa.Integer, nullable=False, comment="1-10"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint(
            "health_score BETWEEN 1 AND 10", name="ck_advisory_health_score"
        ),
    )
    op.create_index(
        "ix_advisories_participant_created",
        "advisories",
        ["participant_id", "created_at"],
    )


def downgrade() -> None:
    # Drop in reverse order (children / dependents first).
    op.drop_index("ix_advisories_participant_created", table_name="advisories")
    op.drop_table("advisories")
    op.drop_table("submissions")
    op.drop_table("responses")
    op.drop_table("questions")
    op.drop_table("surveys")
    op.drop_table("participants")

    bind = op.get_bind()
    question_type.drop(bind, checkfirst=True)
    participant_gender.drop(bind, checkfirst=True)
    participant_category.drop(bind, checkfirst=True)
