"""Tree-level metadata models: document header and timeline phases."""

from __future__ import annotations

from typing import List, Optional

from compliance_navigator.models.base import CamelModel


class TimelinePhase(CamelModel):
    """A phase of the study-activation timeline used to group the checklist."""

    id: int
    name: str
    icon: Optional[str] = None
    note: Optional[str] = None
    # Items in a parallel phase can be worked on concurrently
    parallel: bool = False


class TreeMetadata(CamelModel):
    """Header of the decision tree document."""

    title: Optional[str] = None
    version: Optional[str] = None
    last_updated: Optional[str] = None
    description: Optional[str] = None
    timeline_phases: List[TimelinePhase] = []
