"""AssessmentSession: all mutable state of one assessment.

The session owns the answers, the checklist, the history stack, the
pending-route queue and the current position.  It is created on start,
replaced on restart, and serialized wholesale as :class:`SavedProgress`.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import ValidationError

from compliance_navigator.answers import AnswerStore
from compliance_navigator.checklist import ChecklistAccumulator
from compliance_navigator.errors import ProgressCorrupt
from compliance_navigator.history import HistoryStack
from compliance_navigator.models.state import SavedProgress


@dataclass
class AssessmentSession:
    current_question_id: str
    answers: AnswerStore = field(default_factory=AnswerStore)
    checklist: ChecklistAccumulator = field(default_factory=ChecklistAccumulator)
    history: HistoryStack = field(default_factory=HistoryStack)
    pending_routes: list[str] = field(default_factory=list)
    # Set to the sentinel once the assessment has ended
    terminal: str | None = None

    @property
    def is_complete(self) -> bool:
        return self.terminal is not None

    def to_saved_progress(self) -> SavedProgress:
        return SavedProgress(
            answers=self.answers.to_dict(),
            checklist=self.checklist.entries,
            question_history=self.history.frames,
            current_question_id=self.current_question_id,
            pending_routes=list(self.pending_routes),
            terminal=self.terminal,
        )

    @classmethod
    def from_saved_progress(cls, saved: SavedProgress) -> "AssessmentSession":
        return cls(
            current_question_id=saved.current_question_id,
            answers=AnswerStore(saved.answers),
            checklist=ChecklistAccumulator(saved.checklist),
            history=HistoryStack(saved.question_history),
            pending_routes=list(saved.pending_routes),
            terminal=saved.terminal,
        )

    @classmethod
    def from_document(cls, document: object) -> "AssessmentSession":
        """Restore from a raw saved-progress document (dict or JSON string).

        Raises:
            ProgressCorrupt: if the document does not parse.
        """
        try:
            if isinstance(document, (str, bytes)):
                saved = SavedProgress.model_validate_json(document)
            else:
                saved = SavedProgress.model_validate(document)
        except ValidationError as exc:
            raise ProgressCorrupt(f"Saved progress is corrupt: {exc}") from exc
        return cls.from_saved_progress(saved)
