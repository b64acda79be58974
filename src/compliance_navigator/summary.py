"""SummaryBuilder: the end-of-assessment view over the checklist.

Builds three views of the same items:

    phases      - items grouped by timeline phase, then by track
    required /
    recommended - flat priority split, used when the tree defines no phases
    timeline    - rough time-to-approval estimate from keyword rules

The final question's fixed items are appended to every summary (skipping
texts already on the checklist).  The timeline estimate looks only at the
live checklist, not at those appended items.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from compliance_navigator.constants import (
    BASE_TIMELINE_MONTHS,
    DEFAULT_PHASE,
    DEFAULT_TRACK,
    IRB_REVIEW_LINE,
    TIMELINE_RULES,
)
from compliance_navigator.decision_tree import DecisionTreeStore
from compliance_navigator.models.checklist import ChecklistEntry, Priority
from compliance_navigator.models.summary import (
    AssessmentSummary,
    PhaseGroup,
    TimelineEstimate,
    TimelineLine,
    TrackGroup,
)

logger = logging.getLogger(__name__)


def _format_months(value: float) -> str:
    # 1.0 -> "1", 3.5 -> "3.5"
    return f"{value:g}"


class SummaryBuilder:
    def __init__(self, store: DecisionTreeStore) -> None:
        self._store = store

    def build(
        self,
        checklist: list[ChecklistEntry],
        *,
        terminal: str | None = None,
        questions_answered: int = 0,
    ) -> AssessmentSummary:
        items = self.collect_items(checklist)
        required = sorted(
            (i for i in items if i.priority_level.is_required), key=lambda i: i.sort_key
        )
        recommended = sorted(
            (i for i in items if i.priority_level is Priority.RECOMMENDED),
            key=lambda i: i.sort_key,
        )
        return AssessmentSummary(
            items=items,
            phases=self.group_by_phase(items),
            required=required,
            recommended=recommended,
            timeline=self.estimate_timeline(checklist),
            last_updated=self._store.metadata.last_updated,
            terminal=terminal,
            questions_answered=questions_answered,
        )

    def collect_items(self, checklist: list[ChecklistEntry]) -> list[ChecklistEntry]:
        """Checklist plus the final question's fixed items not already present."""
        items = list(checklist)
        final = self._store.final_question()
        if final is None:
            return items
        texts = {i.text for i in items}
        for item in final.fixed_checklist_items:
            if item.text in texts:
                continue
            items.append(
                ChecklistEntry.from_item(item, question_id=final.id, question_text=final.text)
            )
            texts.add(item.text)
        return items

    def group_by_phase(self, items: list[ChecklistEntry]) -> list[PhaseGroup]:
        """Group items by the tree's timeline phases.

        Phases follow the document's declared order; empty phases are left
        out.  Items whose phase is not declared in the tree do not appear in
        this view.
        """
        by_phase: dict[int, list[ChecklistEntry]] = defaultdict(list)
        for item in items:
            by_phase[item.phase if item.phase is not None else DEFAULT_PHASE].append(item)

        declared = {p.id for p in self._store.timeline_phases}
        orphaned = [pid for pid in by_phase if pid not in declared]
        if orphaned and declared:
            logger.debug("Checklist items in undeclared phase(s) %s", sorted(orphaned))

        groups: list[PhaseGroup] = []
        for phase in self._store.timeline_phases:
            phase_items = by_phase.get(phase.id)
            if not phase_items:
                continue
            by_track: dict[str, list[ChecklistEntry]] = defaultdict(list)
            for item in phase_items:
                by_track[item.track or DEFAULT_TRACK].append(item)
            groups.append(
                PhaseGroup(
                    id=phase.id,
                    name=phase.name,
                    icon=phase.icon,
                    note=phase.note,
                    parallel=phase.parallel,
                    tracks=[
                        TrackGroup(track=key, items=by_track[key]) for key in sorted(by_track)
                    ],
                )
            )
        return groups

    @staticmethod
    def estimate_timeline(checklist: list[ChecklistEntry]) -> TimelineEstimate:
        """Keyword-driven estimate from the live checklist."""
        lines: list[TimelineLine] = []
        total = BASE_TIMELINE_MONTHS
        for rule in TIMELINE_RULES:
            fired = any(
                keyword in entry.text for entry in checklist for keyword in rule["keywords"]
            )
            if fired:
                lines.append(TimelineLine(label=rule["label"], estimate=rule["estimate"]))
                total += rule["months"]
        label, estimate = IRB_REVIEW_LINE
        lines.append(TimelineLine(label=label, estimate=estimate))
        return TimelineEstimate(
            lines=lines,
            total_months=total,
            display=f"{_format_months(total)}-{_format_months(total + 2)} months",
        )
