"""Question type models for the compliance decision tree.

Each question type maps to a specific UI component and answer shape:

  Answerable (shown to the user, an answer is stored):
    - boolean:       pick Yes / No (or the document's two labels)
    - single_choice: pick exactly one option label
    - checkbox:      pick any number of option labels

  Informational (shown, never answered):
    - info:    a page of explanatory content
    - summary: the closing page before the checklist is rendered

Every question also carries a ``role`` tag.  ``endpoint`` questions are never
displayed: when a fan-out question routes to one, its fixed checklist items
are injected straight into the checklist.

The discriminated ``Question`` union uses ``type`` as its discriminator.
The ``question_mapper`` dict maps type strings to their pydantic classes.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import Field, model_validator

from compliance_navigator.errors import InvalidAnswer
from compliance_navigator.models.base import CamelModel
from compliance_navigator.models.checklist import ChecklistItem

# Routing is absent (go to summary), a fixed qid, or option -> qid.
Routing = Optional[Union[str, Dict[str, str]]]

# Stored answer: one option label, or an ordered list of labels (checkbox).
Answer = Union[List[str], str]


# --- Base question type ---

class BaseQuestion(CamelModel):
    """Fields shared by all question types."""

    id: str
    text: str
    help_text: Optional[str] = None
    routing: Routing = None
    checklist_items: Dict[str, List[ChecklistItem]] = {}
    # Items that apply regardless of the answer (endpoints, final question)
    fixed_checklist_items: List[ChecklistItem] = []
    role: Literal["question", "endpoint"] = "question"

    @model_validator(mode="before")
    @classmethod
    def _flat_items_are_fixed(cls, data: Any) -> Any:
        """Endpoint documents list ``checklistItems`` flat instead of per option.

        A flat list does not depend on the answer, so it is folded into
        ``fixed_checklist_items``.
        """
        if not isinstance(data, dict):
            return data
        key = "checklistItems" if "checklistItems" in data else "checklist_items"
        items = data.get(key)
        if not isinstance(items, list):
            return data
        data = dict(data)
        data.pop(key)
        fixed = data.pop("fixedChecklistItems", None) or data.pop("fixed_checklist_items", None) or []
        data["fixedChecklistItems"] = list(fixed) + items
        return data

    @property
    def is_endpoint(self) -> bool:
        return self.role == "endpoint"

    @property
    def takes_answer(self) -> bool:
        """True for question types that store an answer."""
        return False

    @property
    def is_multi_select(self) -> bool:
        return False

    def items_for(self, option: str) -> List[ChecklistItem]:
        """Checklist templates attached to ``option`` (empty if none)."""
        return self.checklist_items.get(option, [])

    def normalize_answer(self, value: Any) -> Answer:
        """Validate ``value`` for this question and return the stored form."""
        raise InvalidAnswer(
            f"Question '{self.id}' of type '{self.type}' does not take an answer"
        )


class _OptionQuestion(BaseQuestion):
    """A question answered by picking from ``options``."""

    options: List[str]

    @property
    def takes_answer(self) -> bool:
        return True

    def normalize_answer(self, value: Any) -> Answer:
        if not isinstance(value, str):
            raise InvalidAnswer(
                f"Question '{self.id}' expects a single option label, "
                f"got {type(value).__name__}"
            )
        if value not in self.options:
            raise InvalidAnswer(
                f"'{value}' is not an option of question '{self.id}'"
            )
        return value


# --- Answerable question types ---

class BooleanQuestion(_OptionQuestion):
    """Two-way choice, typically Yes / No."""

    type: Literal["boolean"] = "boolean"
    options: List[str] = ["Yes", "No"]


class SingleChoiceQuestion(_OptionQuestion):
    """Pick exactly one option label."""

    type: Literal["single_choice"] = "single_choice"


class SkipRule(CamelModel):
    """Route straight to ``target`` when ``option`` is the only selection."""

    option: str
    target: str


class CheckboxQuestion(_OptionQuestion):
    """Pick any number of option labels.

    ``fan_out`` marks a question whose selected options each spawn their own
    sub-path.  Without it, only the first selected option drives routing.
    """

    type: Literal["checkbox"] = "checkbox"
    fan_out: bool = False
    skip_when_only: Optional[SkipRule] = None

    @property
    def is_multi_select(self) -> bool:
        return True

    def normalize_answer(self, value: Any) -> Answer:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            raise InvalidAnswer(
                f"Question '{self.id}' expects a list of option labels, "
                f"got {type(value).__name__}"
            )
        selected: List[str] = []
        for label in value:
            if not isinstance(label, str) or label not in self.options:
                raise InvalidAnswer(
                    f"'{label}' is not an option of question '{self.id}'"
                )
            # Selection order is kept, repeats collapse
            if label not in selected:
                selected.append(label)
        return selected


# --- Informational question types ---

class InfoQuestion(BaseQuestion):
    """Explanatory page; never answered."""

    type: Literal["info"] = "info"
    content: Optional[str] = None


class SummaryQuestion(BaseQuestion):
    """Closing page before the checklist is rendered."""

    type: Literal["summary"] = "summary"
    content: Optional[str] = None


# --- Discriminated union of all question types ---

Question = Annotated[
    Union[
        BooleanQuestion,
        SingleChoiceQuestion,
        CheckboxQuestion,
        InfoQuestion,
        SummaryQuestion,
    ],
    Field(discriminator="type"),
]

# Maps type string -> pydantic class for dynamic deserialization.
question_mapper = {
    "boolean": BooleanQuestion,
    "single_choice": SingleChoiceQuestion,
    "checkbox": CheckboxQuestion,
    "info": InfoQuestion,
    "summary": SummaryQuestion,
}
