"""Checklist item models.

A ``ChecklistItem`` is a template attached to a question's checklist-item
map (keyed by option label) or to its fixed item list.  Once a question is
answered, matching templates are instantiated as ``ChecklistEntry`` objects
carrying a back-reference to the originating question.

Priority labels in the tree document are free text ("REQUIRED BEFORE IRB",
"RECOMMENDED", ...).  They are kept verbatim for display, and classified once
into the ordered ``Priority`` enum which the rest of the SDK works with.
"""

from __future__ import annotations

import enum
from typing import List, Optional, Union

from compliance_navigator.constants import MISSING_ORDER
from compliance_navigator.models.base import CamelModel


class Priority(str, enum.Enum):
    """Checklist priority, ordered from most to least urgent."""

    CRITICAL = "critical"
    REQUIRED = "required"
    RECOMMENDED = "recommended"
    UNSPECIFIED = "unspecified"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @property
    def is_required(self) -> bool:
        """True for priorities that block the study (critical or required)."""
        return self in (Priority.CRITICAL, Priority.REQUIRED)


_PRIORITY_RANK = {
    Priority.CRITICAL: 0,
    Priority.REQUIRED: 1,
    Priority.RECOMMENDED: 2,
    Priority.UNSPECIFIED: 3,
}


def classify_priority(label: str | None) -> Priority:
    """Map a free-text priority label onto the ``Priority`` enum.

    Labels are matched by substring, case-insensitively, so that variants
    like "REQUIRED IN PROTOCOL" classify as ``REQUIRED``.  CRITICAL is
    checked first because it outranks REQUIRED.
    """
    if not label:
        return Priority.UNSPECIFIED
    upper = label.upper()
    if "CRITICAL" in upper:
        return Priority.CRITICAL
    if "REQUIRED" in upper:
        return Priority.REQUIRED
    if "RECOMMENDED" in upper:
        return Priority.RECOMMENDED
    return Priority.UNSPECIFIED


class ChecklistItem(CamelModel):
    """A checklist-item template from the decision tree document."""

    text: str
    priority: Optional[str] = None
    order: Optional[Union[int, float]] = None
    contact: Optional[str] = None
    link: Optional[str] = None
    timeline: Optional[str] = None
    duration: Optional[str] = None
    phase: Optional[int] = None
    track: Optional[str] = None
    note: Optional[str] = None
    details: List[str] = []

    @property
    def sort_key(self) -> Union[int, float]:
        """Numeric order with missing values sunk to ``MISSING_ORDER``."""
        return self.order if self.order is not None else MISSING_ORDER

    @property
    def priority_level(self) -> Priority:
        return classify_priority(self.priority)


class ChecklistEntry(ChecklistItem):
    """A template instantiated for a specific question.

    Entries are value objects: deduplication compares ``text`` only.
    """

    question_id: str
    question_text: Optional[str] = None

    @classmethod
    def from_item(
        cls, item: ChecklistItem, *, question_id: str, question_text: str | None
    ) -> "ChecklistEntry":
        return cls(
            **item.model_dump(exclude={"question_id", "question_text"}),
            question_id=question_id,
            question_text=question_text,
        )
