"""Async CRUD repository for Assessment.

All public methods accept an ``AsyncSession`` so the caller controls
transaction boundaries.  Methods call ``flush()`` to surface constraint
errors early but never ``commit()``.

The repository avoids business-logic validation; that belongs in the
navigator service.  It *does* enforce structural invariants (a completed
assessment must name its terminal sentinel) via DB constraints.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from compliance_db.models.assessment import Assessment
from compliance_db.models.enums import AssessmentStatus


class AssessmentRepository:
    """Async read/write operations on the ``compliance_assessments`` table."""

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create(
        self,
        db: AsyncSession,
        *,
        user_id: str,
        assessment_id: str,
        state: dict[str, Any],
        current_question_id: str | None = None,
        tree_version: str | None = None,
    ) -> Assessment:
        """Insert a new assessment row and return it.

        The caller must ``await db.commit()`` to persist.
        """
        row = Assessment(
            user_id=user_id,
            assessment_id=assessment_id,
            status=AssessmentStatus.IN_PROGRESS,
            state=state,
            current_question_id=current_question_id,
            tree_version=tree_version,
        )
        db.add(row)
        await db.flush()  # Populate defaults (id, timestamps)
        return row

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(self, db: AsyncSession, pk: uuid.UUID) -> Assessment | None:
        """Fetch an assessment by its primary-key UUID."""
        return await db.get(Assessment, pk)

    async def get(
        self, db: AsyncSession, user_id: str, assessment_id: str
    ) -> Assessment | None:
        """Fetch an assessment by the unique (user_id, assessment_id) pair."""
        stmt = select(Assessment).where(
            Assessment.user_id == user_id,
            Assessment.assessment_id == assessment_id,
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_user(
        self,
        db: AsyncSession,
        user_id: str,
        *,
        status: AssessmentStatus | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Assessment]:
        """List a user's assessments, most recent first."""
        stmt = select(Assessment).where(Assessment.user_id == user_id)
        if status is not None:
            stmt = stmt.where(Assessment.status == status)
        stmt = stmt.order_by(Assessment.created_at.desc()).limit(limit).offset(offset)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    async def save_state(
        self,
        db: AsyncSession,
        row: Assessment,
        state: dict[str, Any],
        *,
        current_question_id: str | None,
    ) -> Assessment:
        """Replace the whole navigator state of ``row``.

        A new dict is assigned so SQLAlchemy detects the JSONB change.
        """
        row.state = dict(state)
        row.current_question_id = current_question_id
        row.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return row

    async def mark_completed(
        self, db: AsyncSession, row: Assessment, *, terminal: str
    ) -> Assessment:
        """Mark an assessment as completed by ``terminal``.

        The CHECK constraint ``ck_completed_has_terminal`` enforces that
        ``terminal`` is non-null whenever status is completed.
        """
        now = datetime.now(timezone.utc)
        row.status = AssessmentStatus.COMPLETED
        row.terminal = terminal
        row.completed_at = now
        row.updated_at = now
        await db.flush()
        return row

    async def reopen(self, db: AsyncSession, row: Assessment) -> Assessment:
        """Return a completed assessment to ``in_progress``."""
        row.status = AssessmentStatus.IN_PROGRESS
        row.terminal = None
        row.completed_at = None
        row.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return row

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete(self, db: AsyncSession, row: Assessment) -> None:
        """Hard-delete an assessment row."""
        await db.delete(row)
        await db.flush()
