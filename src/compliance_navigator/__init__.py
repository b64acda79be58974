"""compliance_navigator: research compliance questionnaire SDK.

Public API:
    NavigatorEngine       - drives one assessment: answers, navigation, checklist
    DecisionTreeStore     - loads the decision tree document with lookup helpers
    AssessmentService     - async, database-backed orchestration of assessments
    SummaryBuilder        - phase/track grouping and timeline estimate
    StepResult            - union type returned by engine step methods
    QuestionStep          - step: present the current question
    CompletionStep        - step: assessment finished with a checklist
    AssessmentInfo        - public view of a persisted assessment

Persistence:
    ProgressStore         - ABC for a single-slot progress store
    InMemoryProgressStore - process-local store
    JsonFileProgressStore - single JSON document on disk
    SavedProgress         - whole-session snapshot

Errors:
    QuestionNotFound, TreeLoadError, ProgressCorrupt, InvalidAnswer
"""

from compliance_navigator.decision_tree import DecisionTreeStore
from compliance_navigator.engine import NavigatorEngine
from compliance_navigator.errors import (
    InvalidAnswer,
    ProgressCorrupt,
    QuestionNotFound,
    TreeLoadError,
)
from compliance_navigator.interfaces import ProgressStore
from compliance_navigator.models.session import (
    AssessmentInfo,
    CompletionStep,
    NavigationState,
    QuestionPayload,
    QuestionStep,
    StepResult,
)
from compliance_navigator.models.state import HistoryFrame, SavedProgress
from compliance_navigator.service import AssessmentService
from compliance_navigator.storage import InMemoryProgressStore, JsonFileProgressStore
from compliance_navigator.summary import SummaryBuilder

__all__ = [
    # Engine & store
    "NavigatorEngine",
    "DecisionTreeStore",
    "AssessmentService",
    "SummaryBuilder",
    # Session / step
    "AssessmentInfo",
    "CompletionStep",
    "NavigationState",
    "QuestionPayload",
    "QuestionStep",
    "StepResult",
    # Persistence
    "ProgressStore",
    "InMemoryProgressStore",
    "JsonFileProgressStore",
    "SavedProgress",
    "HistoryFrame",
    # Errors
    "InvalidAnswer",
    "ProgressCorrupt",
    "QuestionNotFound",
    "TreeLoadError",
]
