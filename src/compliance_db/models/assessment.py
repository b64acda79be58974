"""Assessment ORM model: single row per compliance assessment.

The whole navigator state (answers, checklist, history stack, pending
routes) lives in one JSONB ``state`` column holding a ``SavedProgress``
document, so the service can load one row and replay the assessment
without touching other tables.  ``current_question_id`` and ``terminal``
are duplicated into plain columns for listing and filtering.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Index, String, Text, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from compliance_db.models.base import Base
from compliance_db.models.enums import AssessmentStatus


class Assessment(Base):
    """One row per assessment.

    A user may run many assessments over time; each is uniquely identified
    by the (user_id, assessment_id) pair.
    """

    __tablename__ = "compliance_assessments"

    # --- Primary key ---
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # --- Identity ---
    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    # Caller-supplied assessment identifier, unique within a user
    assessment_id: Mapped[str] = mapped_column(Text, nullable=False)

    # --- Lifecycle ---
    status: Mapped[AssessmentStatus] = mapped_column(
        # Stored as the lowercase string value, not the Python name
        String(20),
        nullable=False,
        default=AssessmentStatus.IN_PROGRESS,
        index=True,
    )
    current_question_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    # "summary" / "end_determination" once completed
    terminal: Mapped[str | None] = mapped_column(String(40), nullable=True)
    # Tree version tag so we can trace which tree drove the assessment
    tree_version: Mapped[str | None] = mapped_column(Text, nullable=True)

    # --- Navigator state ---
    # SavedProgress document with camelCase keys
    state: Mapped[dict] = mapped_column(
        JSONB,
        nullable=False,
        server_default=text("'{}'::jsonb"),
    )

    # --- Timestamps ---
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )

    # --- Table-level constraints ---
    __table_args__ = (
        UniqueConstraint("user_id", "assessment_id", name="uq_user_assessment"),
        # Completed assessments must record which sentinel ended them
        CheckConstraint(
            "status != 'completed' OR terminal IS NOT NULL",
            name="ck_completed_has_terminal",
        ),
        # Listing hot path: a user's assessments, newest first
        Index("ix_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Assessment(id={self.id!s}, user={self.user_id!r}, "
            f"assessment={self.assessment_id!r}, status={self.status!r}, "
            f"question={self.current_question_id!r})>"
        )
