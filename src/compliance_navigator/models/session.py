"""Session and step models: the contract between the navigator and API callers.

These models define what the engine returns at each step of an assessment.
They are intentionally decoupled from the ORM models in ``compliance_db`` so
that API consumers never see database internals.

Step types:
  - QuestionStep: present the current question to the user
  - CompletionStep: the assessment reached a terminal sentinel

The ``StepResult`` union covers both cases so callers can dispatch on ``type``.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from compliance_navigator.models.checklist import ChecklistEntry
from compliance_navigator.models.question import Answer
from compliance_navigator.models.summary import AssessmentSummary


class QuestionPayload(BaseModel):
    """Flattened question for API consumers.

    Strips routing and checklist templates and presents only what the UI
    needs to render the question.
    """

    id: str
    text: str
    type: str
    help_text: str | None = None
    # Option labels for boolean/single_choice/checkbox
    options: list[str] | None = None
    # Body text for info/summary pages
    content: str | None = None
    multi_select: bool = False


class NavigationState(BaseModel):
    """Which navigation controls are enabled for the current question."""

    can_retreat: bool
    can_advance: bool
    # The next forward move ends the assessment (summary page / no routing)
    is_final: bool
    # 1-based position among substantive questions
    position: int
    total: int


class QuestionStep(BaseModel):
    """Engine step: present the current question and wait for an answer."""

    type: Literal["question"] = "question"
    question: QuestionPayload
    answer: Answer | None = None
    navigation: NavigationState
    checklist: list[ChecklistEntry] = []
    notice: str | None = None


class CompletionStep(BaseModel):
    """Engine step: assessment finished.

    ``terminal`` is "summary" for a normal finish or "end_determination"
    when the study-type selection routed nowhere.
    """

    type: Literal["completed"] = "completed"
    terminal: str
    checklist: list[ChecklistEntry]
    summary: AssessmentSummary
    notice: str | None = None


# Callers can match on step.type to dispatch rendering logic.
StepResult = QuestionStep | CompletionStep


class AssessmentInfo(BaseModel):
    """Public view of an assessment for API consumers.

    Maps from the ORM ``Assessment`` model but exposes only what external
    callers need.
    """

    user_id: str
    assessment_id: str
    status: str
    current_question_id: str | None = None
    tree_version: str | None = None
    created_at: datetime
    updated_at: datetime
