"""AnswerStore: the user's current answer per question.

Values are already normalized by the question model: a single option label
for boolean/single_choice questions, an ordered list of unique labels for
checkbox questions.  Absence means unanswered.
"""

from __future__ import annotations

import copy
from typing import Iterator, Mapping

from compliance_navigator.models.question import Answer


class AnswerStore:
    def __init__(self, answers: Mapping[str, Answer] | None = None) -> None:
        self._answers: dict[str, Answer] = {}
        for qid, value in (answers or {}).items():
            self.set(qid, value)

    def get(self, qid: str) -> Answer | None:
        value = self._answers.get(qid)
        # Hand out copies so callers cannot mutate stored lists
        return list(value) if isinstance(value, list) else value

    def set(self, qid: str, value: Answer) -> None:
        self._answers[qid] = list(value) if isinstance(value, (list, tuple)) else value

    def remove(self, qid: str) -> bool:
        """Forget the answer to ``qid``.  Returns True if one was stored."""
        return self._answers.pop(qid, None) is not None

    def is_answered(self, qid: str) -> bool:
        """True when ``qid`` has a non-empty answer."""
        value = self._answers.get(qid)
        if isinstance(value, list):
            return len(value) > 0
        return value is not None

    def clear(self) -> None:
        self._answers.clear()

    def to_dict(self) -> dict[str, Answer]:
        return copy.deepcopy(self._answers)

    def __contains__(self, qid: object) -> bool:
        return qid in self._answers

    def __iter__(self) -> Iterator[str]:
        return iter(self._answers)

    def __len__(self) -> int:
        return len(self._answers)
