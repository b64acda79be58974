"""Summary models returned once an assessment reaches its end.

The summary is a read-only view over the checklist: grouped by timeline
phase and track, split into required and recommended lists, plus a rough
time-to-activation estimate.
"""

from typing import Optional

from pydantic import BaseModel

from compliance_navigator.models.checklist import ChecklistEntry


class TrackGroup(BaseModel):
    """Items of one phase that share a track label."""

    track: str
    items: list[ChecklistEntry]


class PhaseGroup(BaseModel):
    """Checklist items belonging to one timeline phase."""

    id: int
    name: str
    icon: str | None = None
    note: str | None = None
    parallel: bool = False
    tracks: list[TrackGroup]


class TimelineLine(BaseModel):
    label: str
    estimate: str


class TimelineEstimate(BaseModel):
    """Rough time to study activation derived from the checklist text."""

    lines: list[TimelineLine]
    total_months: float
    # e.g. "5-7 months"
    display: str


class AssessmentSummary(BaseModel):
    items: list[ChecklistEntry]
    phases: list[PhaseGroup]
    required: list[ChecklistEntry]
    recommended: list[ChecklistEntry]
    timeline: TimelineEstimate
    last_updated: Optional[str] = None
    terminal: str | None = None
    questions_answered: int = 0
