"""AssessmentService: database-backed orchestration of many assessments.

Stateless service pattern: each call loads the assessment row, restores a
:class:`NavigatorEngine` from its JSONB state, runs one engine operation,
writes the whole snapshot back, and returns the result.  No in-memory state
is kept between calls.

The service accepts an ``AsyncSession`` from the caller so that the caller
(typically a FastAPI dependency) controls transaction boundaries: the
repository calls ``flush()`` but never ``commit()``.

Corrupt stored state is not an error here: the assessment restarts from the
first question and the returned step carries a ``notice``.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from compliance_db.models.assessment import Assessment
from compliance_db.models.enums import AssessmentStatus
from compliance_db.repository import AssessmentRepository

from compliance_navigator.decision_tree import DecisionTreeStore
from compliance_navigator.engine import NavigatorEngine
from compliance_navigator.models.checklist import ChecklistEntry
from compliance_navigator.models.session import AssessmentInfo, StepResult
from compliance_navigator.models.summary import AssessmentSummary

logger = logging.getLogger(__name__)


class AssessmentService:
    """Runs navigator operations against persisted assessments.

    Args:
        store: a loaded :class:`DecisionTreeStore` instance
    """

    def __init__(self, store: DecisionTreeStore) -> None:
        self._store = store
        self._repo = AssessmentRepository()

    @property
    def store(self) -> DecisionTreeStore:
        return self._store

    # ==================================================================
    # Assessment lifecycle
    # ==================================================================

    async def create_assessment(
        self, db: AsyncSession, *, user_id: str, assessment_id: str
    ) -> AssessmentInfo:
        """Create a new assessment positioned on the first question.

        The caller must ``await db.commit()`` to persist.
        """
        existing = await self._repo.get(db, user_id, assessment_id)
        if existing is not None:
            raise ValueError(
                f"Assessment already exists: user_id={user_id}, assessment_id={assessment_id}"
            )
        engine = NavigatorEngine(self._store)
        engine.start_assessment()
        saved = engine.snapshot()
        row = await self._repo.create(
            db,
            user_id=user_id,
            assessment_id=assessment_id,
            state=saved.to_document(),
            current_question_id=saved.current_question_id,
            tree_version=self._store.version,
        )
        logger.info("Created assessment %s for user %s", assessment_id, user_id)
        return self._to_info(row)

    async def get_assessment(
        self, db: AsyncSession, *, user_id: str, assessment_id: str
    ) -> AssessmentInfo | None:
        """Fetch assessment info.  Returns None if not found."""
        row = await self._repo.get(db, user_id, assessment_id)
        if row is None:
            return None
        return self._to_info(row)

    async def list_assessments(
        self,
        db: AsyncSession,
        *,
        user_id: str,
        status: AssessmentStatus | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[AssessmentInfo]:
        """List assessments for a user, most recent first."""
        rows = await self._repo.list_by_user(
            db, user_id, status=status, limit=limit, offset=offset
        )
        return [self._to_info(r) for r in rows]

    async def delete_assessment(
        self, db: AsyncSession, *, user_id: str, assessment_id: str
    ) -> None:
        row = await self._load_row(db, user_id, assessment_id)
        await self._repo.delete(db, row)
        logger.info("Deleted assessment %s for user %s", assessment_id, user_id)

    async def restart(
        self, db: AsyncSession, *, user_id: str, assessment_id: str
    ) -> StepResult:
        """Hard reset: discard all answers and start from the first question."""
        row = await self._load_row(db, user_id, assessment_id)
        engine = NavigatorEngine(self._store)
        step = engine.start_assessment()
        await self._persist(db, row, engine)
        logger.info("Restarted assessment %s", assessment_id)
        return step

    # ==================================================================
    # Step API
    # ==================================================================

    async def get_current_step(
        self, db: AsyncSession, *, user_id: str, assessment_id: str
    ) -> StepResult:
        """Return the current step.

        Read-only unless the stored state was corrupt, in which case the
        fresh state is written back.
        """
        row, engine = await self._load(db, user_id, assessment_id)
        if engine.notice:
            await self._persist(db, row, engine)
        return engine.current_step()

    async def submit_answer(
        self,
        db: AsyncSession,
        *,
        user_id: str,
        assessment_id: str,
        question_id: str | None = None,
        value: Any,
    ) -> StepResult:
        """Store an answer and return the (unchanged-position) step.

        ``question_id`` defaults to the current question.  Answering does
        not move forward; call :meth:`advance` for that.
        """
        row, engine = await self._load(db, user_id, assessment_id)
        if engine.is_complete():
            raise ValueError(
                f"Cannot answer: assessment {assessment_id} is already completed"
            )
        qid = question_id if question_id is not None else engine.session.current_question_id
        step = engine.answer(qid, value)
        await self._persist(db, row, engine)
        return step

    async def advance(
        self, db: AsyncSession, *, user_id: str, assessment_id: str
    ) -> StepResult:
        row, engine = await self._load(db, user_id, assessment_id)
        step = engine.advance()
        await self._persist(db, row, engine)
        return step

    async def retreat(
        self, db: AsyncSession, *, user_id: str, assessment_id: str
    ) -> StepResult:
        """Go back one question.

        Raises:
            ValueError: if the assessment is on its first question.
        """
        row, engine = await self._load(db, user_id, assessment_id)
        step = engine.retreat()
        await self._persist(db, row, engine)
        return step

    async def finish(
        self, db: AsyncSession, *, user_id: str, assessment_id: str
    ) -> StepResult:
        row, engine = await self._load(db, user_id, assessment_id)
        step = engine.finish()
        await self._persist(db, row, engine)
        return step

    async def get_checklist(
        self, db: AsyncSession, *, user_id: str, assessment_id: str
    ) -> list[ChecklistEntry]:
        _, engine = await self._load(db, user_id, assessment_id)
        return engine.current_checklist()

    async def get_summary(
        self, db: AsyncSession, *, user_id: str, assessment_id: str
    ) -> AssessmentSummary:
        """Summary view of the checklist; available at any point."""
        _, engine = await self._load(db, user_id, assessment_id)
        return engine.summary()

    # ==================================================================
    # Internals
    # ==================================================================

    async def _load_row(
        self, db: AsyncSession, user_id: str, assessment_id: str
    ) -> Assessment:
        """Load an assessment row or raise ValueError if not found."""
        row = await self._repo.get(db, user_id, assessment_id)
        if row is None:
            raise ValueError(
                f"Assessment not found: user_id={user_id}, assessment_id={assessment_id}"
            )
        return row

    async def _load(
        self, db: AsyncSession, user_id: str, assessment_id: str
    ) -> tuple[Assessment, NavigatorEngine]:
        row = await self._load_row(db, user_id, assessment_id)
        engine = NavigatorEngine(self._store)
        engine.resume(row.state)
        if engine.notice:
            logger.warning(
                "Assessment %s had corrupt state and was restarted", assessment_id
            )
        return row, engine

    async def _persist(
        self, db: AsyncSession, row: Assessment, engine: NavigatorEngine
    ) -> None:
        """Write the engine snapshot back and sync the status column."""
        saved = engine.snapshot()
        await self._repo.save_state(
            db, row, saved.to_document(), current_question_id=saved.current_question_id
        )
        if saved.terminal is not None and row.status != AssessmentStatus.COMPLETED:
            await self._repo.mark_completed(db, row, terminal=saved.terminal)
        elif saved.terminal is None and row.status == AssessmentStatus.COMPLETED:
            await self._repo.reopen(db, row)

    @staticmethod
    def _to_info(row: Assessment) -> AssessmentInfo:
        """Convert an ORM row to a public AssessmentInfo."""
        return AssessmentInfo(
            user_id=row.user_id,
            assessment_id=row.assessment_id,
            status=row.status.value if isinstance(row.status, AssessmentStatus) else str(row.status),
            current_question_id=row.current_question_id,
            tree_version=row.tree_version,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
