"""Serializable assessment state.

``SavedProgress`` is the whole-session snapshot written to a
:class:`~compliance_navigator.interfaces.ProgressStore` and to the JSONB
``state`` column of ``compliance_db``.  Keys dump in camelCase so the
document matches the layout used by the browser-side store.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import Field

from compliance_navigator.models.base import CamelModel
from compliance_navigator.models.checklist import ChecklistEntry
from compliance_navigator.models.question import Answer


class HistoryFrame(CamelModel):
    """A visited question as it stood when the user moved forward from it."""

    question_id: str
    answer: Optional[Answer] = None
    # Copy of the pending-route queue while this question was current
    pending_routes: List[str] = []


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SavedProgress(CamelModel):
    """Whole-session snapshot.

    ``terminal`` holds the sentinel (``summary`` / ``end_determination``)
    once the assessment has reached its end, otherwise ``None``.
    """

    answers: Dict[str, Answer] = {}
    checklist: List[ChecklistEntry] = []
    question_history: List[HistoryFrame] = []
    current_question_id: str
    pending_routes: List[str] = []
    terminal: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)

    def to_document(self) -> dict:
        """Dump to a JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
