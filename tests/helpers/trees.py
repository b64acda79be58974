"""Small inline decision trees for scenario tests.

FAN_OUT_DOCUMENT layout::

    q1 (checkbox, fan-out)
      A  -> x  ─┐
      B  -> y ──┼─ y's own routing goes to "other"
      C  -> z  ─┤
      QI -> ep  │  (endpoint: injected, never displayed)
                └─> conv -> summary

Sub-questions: x, y, z.  Endpoint: ep.
"""

import copy


FAN_OUT_DOCUMENT = {
    "metadata": {
        "title": "Fan-out test tree",
        "version": "test",
        "lastUpdated": "2026-01-01",
        "timelinePhases": [
            {"id": 1, "name": "Preparation", "icon": "graduation-cap", "parallel": True},
            {"id": 2, "name": "Review", "icon": "clipboard-check"},
        ],
    },
    "questions": [
        {
            "id": "q1",
            "type": "checkbox",
            "fanOut": True,
            "text": "Pick study types",
            "options": ["A", "B", "C", "QI"],
            "routing": {"A": "x", "B": "y", "C": "z", "QI": "ep"},
            "checklistItems": {
                "A": [{"text": "A item", "priority": "REQUIRED", "order": 5}],
                "C": [{"text": "C item", "priority": "RECOMMENDED", "order": 6}],
            },
        },
        {
            "id": "x",
            "type": "boolean",
            "text": "X?",
            "routing": "conv",
            "checklistItems": {
                "Yes": [{"text": "X yes", "priority": "REQUIRED", "order": 2}],
                "No": [{"text": "X no", "priority": "RECOMMENDED", "order": 3}],
            },
        },
        {
            "id": "y",
            "type": "boolean",
            "text": "Y?",
            "routing": "other",
            "checklistItems": {
                "Yes": [{"text": "Y yes", "priority": "RECOMMENDED", "order": 1}],
            },
        },
        {"id": "z", "type": "boolean", "text": "Z?", "routing": "conv"},
        {
            "id": "ep",
            "type": "info",
            "role": "endpoint",
            "text": "Endpoint",
            "checklistItems": [
                {"text": "Endpoint item", "priority": "REQUIRED", "order": 4},
            ],
        },
        {"id": "other", "type": "boolean", "text": "Other?", "routing": "conv"},
        {"id": "conv", "type": "boolean", "text": "Converge?"},
    ],
}


def fan_out_document() -> dict:
    """Fresh deep copy so tests may mutate it."""
    return copy.deepcopy(FAN_OUT_DOCUMENT)


def single_question_document(**overrides) -> dict:
    """One boolean question with checklist items and no routing."""
    question = {
        "id": "only",
        "type": "boolean",
        "text": "Only question?",
        "checklistItems": {
            "Yes": [
                {"text": "Only yes (second)", "priority": "REQUIRED", "order": 2},
                {"text": "Only yes (first)", "priority": "REQUIRED", "order": 1},
            ],
            "No": [{"text": "Only no", "priority": "RECOMMENDED"}],
        },
    }
    question.update(overrides)
    return {"metadata": {"title": "Single"}, "questions": [question]}
