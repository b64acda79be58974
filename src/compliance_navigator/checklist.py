"""ChecklistAccumulator: keeps the checklist in step with the current answers.

Every entry carries the id of the question it came from.  Answering a
question replaces all of that question's entries, so the checklist always
reflects the current selection and never the history of selections.

The list is kept sorted by ``order`` (missing order sinks to 999).  The sort
is stable, so entries with equal order keep their insertion order.
"""

from __future__ import annotations

import logging
from typing import Iterable

from compliance_navigator.models.checklist import ChecklistEntry
from compliance_navigator.models.question import Answer, BaseQuestion

logger = logging.getLogger(__name__)


class ChecklistAccumulator:
    def __init__(self, entries: Iterable[ChecklistEntry] | None = None) -> None:
        self._entries: list[ChecklistEntry] = list(entries or [])

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def apply_answer(self, question: BaseQuestion, answer: Answer | None) -> None:
        """Replace ``question``'s entries with the templates of ``answer``.

        A list answer contributes the templates of every selected label, in
        selection order.  Labels without templates contribute nothing.
        """
        self.remove_question(question.id)
        if answer is None:
            return
        labels = answer if isinstance(answer, list) else [answer]
        for label in labels:
            for item in question.items_for(label):
                self._entries.append(
                    ChecklistEntry.from_item(
                        item, question_id=question.id, question_text=question.text
                    )
                )
        self._sort()

    def remove_question(self, qid: str) -> int:
        """Drop every entry that originated from ``qid``.  Returns the count."""
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.question_id != qid]
        return before - len(self._entries)

    def inject_endpoint(self, question: BaseQuestion) -> int:
        """Append ``question``'s fixed items whose text is not yet present.

        Returns the number of entries added.
        """
        added = 0
        for item in question.fixed_checklist_items:
            if self.has_text(item.text):
                continue
            self._entries.append(
                ChecklistEntry.from_item(
                    item, question_id=question.id, question_text=question.text
                )
            )
            added += 1
        if added:
            self._sort()
            logger.debug("Injected %d item(s) from endpoint '%s'", added, question.id)
        return added

    def clear(self) -> None:
        self._entries.clear()

    def _sort(self) -> None:
        self._entries.sort(key=lambda e: e.sort_key)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def entries(self) -> list[ChecklistEntry]:
        """Current entries in sort order (a copy of the list)."""
        return list(self._entries)

    def texts(self) -> list[str]:
        return [e.text for e in self._entries]

    def has_text(self, text: str) -> bool:
        return any(e.text == text for e in self._entries)

    def for_question(self, qid: str) -> list[ChecklistEntry]:
        return [e for e in self._entries if e.question_id == qid]

    def __len__(self) -> int:
        return len(self._entries)
