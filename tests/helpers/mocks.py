"""In-memory stand-ins for the database layer.

Mock strategy:
  - MockAssessmentRow has the same attributes as the ``Assessment`` ORM
    model but no SQLAlchemy dependency.  The service reads and writes the
    attributes directly.
  - MockRepository implements every async method the service calls,
    mutating MockAssessmentRow in place just like AssessmentRepository.
  - AsyncMock stands in for AsyncSession (db); flush() is a no-op.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from compliance_db.models.enums import AssessmentStatus


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class MockAssessmentRow:
    """In-memory stand-in for the Assessment ORM model."""

    user_id: str = "user1"
    assessment_id: str = "a1"
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    status: AssessmentStatus = AssessmentStatus.IN_PROGRESS
    current_question_id: str | None = None
    terminal: str | None = None
    tree_version: str | None = None
    state: dict = field(default_factory=dict)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)
    completed_at: datetime | None = None


class MockRepository:
    """In-memory AssessmentRepository replacement keyed by (user_id, assessment_id)."""

    def __init__(self):
        self._rows: dict[tuple[str, str], MockAssessmentRow] = {}

    @property
    def rows(self) -> dict[tuple[str, str], MockAssessmentRow]:
        return self._rows

    async def create(
        self, db, *, user_id, assessment_id, state, current_question_id=None, tree_version=None,
    ):
        row = MockAssessmentRow(
            user_id=user_id,
            assessment_id=assessment_id,
            state=state,
            current_question_id=current_question_id,
            tree_version=tree_version,
        )
        self._rows[(user_id, assessment_id)] = row
        return row

    async def get(self, db, user_id, assessment_id):
        return self._rows.get((user_id, assessment_id))

    async def list_by_user(self, db, user_id, *, status=None, limit=20, offset=0):
        rows = [r for r in self._rows.values() if r.user_id == user_id]
        if status is not None:
            rows = [r for r in rows if r.status == status]
        rows.sort(key=lambda r: r.created_at, reverse=True)
        return rows[offset:offset + limit]

    async def save_state(self, db, row, state, *, current_question_id):
        row.state = dict(state)
        row.current_question_id = current_question_id
        row.updated_at = _now()
        return row

    async def mark_completed(self, db, row, *, terminal):
        row.status = AssessmentStatus.COMPLETED
        row.terminal = terminal
        row.completed_at = _now()
        row.updated_at = row.completed_at
        return row

    async def reopen(self, db, row):
        row.status = AssessmentStatus.IN_PROGRESS
        row.terminal = None
        row.completed_at = None
        row.updated_at = _now()
        return row

    async def delete(self, db, row):
        self._rows.pop((row.user_id, row.assessment_id), None)
