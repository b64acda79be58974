"""Public model re-exports for compliance_navigator.

Consumers should import from ``compliance_navigator.models`` rather than
reaching into sub-modules directly.
"""

# --- Checklist ---
from compliance_navigator.models.checklist import (
    ChecklistEntry,
    ChecklistItem,
    Priority,
    classify_priority,
)

# --- Questions ---
from compliance_navigator.models.question import (
    Answer,
    BaseQuestion,
    BooleanQuestion,
    CheckboxQuestion,
    InfoQuestion,
    Question,
    Routing,
    SingleChoiceQuestion,
    SkipRule,
    SummaryQuestion,
    question_mapper,
)

# --- Tree metadata ---
from compliance_navigator.models.tree import TimelinePhase, TreeMetadata

# --- Saved state ---
from compliance_navigator.models.state import HistoryFrame, SavedProgress

# --- Summary ---
from compliance_navigator.models.summary import (
    AssessmentSummary,
    PhaseGroup,
    TimelineEstimate,
    TimelineLine,
    TrackGroup,
)

# --- Session / step ---
from compliance_navigator.models.session import (
    AssessmentInfo,
    CompletionStep,
    NavigationState,
    QuestionPayload,
    QuestionStep,
    StepResult,
)

__all__ = [
    # Checklist
    "ChecklistEntry",
    "ChecklistItem",
    "Priority",
    "classify_priority",
    # Questions
    "Answer",
    "BaseQuestion",
    "BooleanQuestion",
    "CheckboxQuestion",
    "InfoQuestion",
    "Question",
    "Routing",
    "SingleChoiceQuestion",
    "SkipRule",
    "SummaryQuestion",
    "question_mapper",
    # Tree
    "TimelinePhase",
    "TreeMetadata",
    # State
    "HistoryFrame",
    "SavedProgress",
    # Summary
    "AssessmentSummary",
    "PhaseGroup",
    "TimelineEstimate",
    "TimelineLine",
    "TrackGroup",
    # Session
    "AssessmentInfo",
    "CompletionStep",
    "NavigationState",
    "QuestionPayload",
    "QuestionStep",
    "StepResult",
]
