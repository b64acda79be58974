"""NavigatorEngine: drives one assessment through the decision tree.

The engine is the host-facing facade over the core components::

    store = DecisionTreeStore(); store.load()
    engine = NavigatorEngine(store)
    engine.start_assessment()
    engine.answer("q1_human_subjects", "Yes")
    engine.advance()
    ...
    engine.is_complete()      # True once a terminal sentinel is reached
    engine.summary()          # grouped checklist + timeline estimate

All state lives in one :class:`AssessmentSession`.  The engine is
synchronous; every call runs to completion before returning.  When a
:class:`ProgressStore` is attached, every state change is saved to it.

Position semantics:
    - ``current_question_id`` always names a displayable question.
    - Reaching ``summary`` / ``end_determination`` (or an id missing from the
      tree) sets ``terminal`` and leaves the current id on the question that
      led there, so :meth:`retreat` returns to it.
"""

from __future__ import annotations

import logging
from typing import Any

from compliance_navigator.constants import NON_SUBSTANTIVE_TYPES, SUMMARY_ID, TERMINAL_IDS
from compliance_navigator.decision_tree import DecisionTreeStore
from compliance_navigator.errors import InvalidAnswer, ProgressCorrupt, QuestionNotFound
from compliance_navigator.interfaces import ProgressStore
from compliance_navigator.models.checklist import ChecklistEntry
from compliance_navigator.models.question import BaseQuestion, CheckboxQuestion, Question
from compliance_navigator.models.session import (
    CompletionStep,
    NavigationState,
    QuestionPayload,
    QuestionStep,
    StepResult,
)
from compliance_navigator.models.state import SavedProgress
from compliance_navigator.models.summary import AssessmentSummary
from compliance_navigator.routing import RouteResolver
from compliance_navigator.session import AssessmentSession
from compliance_navigator.summary import SummaryBuilder

logger = logging.getLogger(__name__)

CORRUPT_PROGRESS_NOTICE = "Failed to load saved progress. Starting new assessment."


class NavigatorEngine:
    """Traversal and checklist engine for one assessment.

    Args:
        store: a loaded :class:`DecisionTreeStore`
        progress_store: optional persistence channel; when given, state is
            saved after every change
    """

    def __init__(
        self,
        store: DecisionTreeStore,
        *,
        progress_store: ProgressStore | None = None,
    ) -> None:
        self._store = store
        self._resolver = RouteResolver(store)
        self._summary = SummaryBuilder(store)
        self._progress_store = progress_store
        self._session: AssessmentSession | None = None
        # Non-fatal message for the host (e.g. corrupt saved progress)
        self.notice: str | None = None

    # ==================================================================
    # Lifecycle
    # ==================================================================

    @property
    def session(self) -> AssessmentSession:
        return self._require_session()

    @property
    def started(self) -> bool:
        return self._session is not None

    def start_assessment(self) -> StepResult:
        """Begin a fresh assessment at the first question of the tree."""
        first = self._store.first_question()
        self._session = AssessmentSession(current_question_id=first.id)
        self.notice = None
        logger.info("Assessment started at '%s'", first.id)
        self._autosave()
        return self.current_step()

    def restart(self) -> StepResult:
        """Hard reset: discard all state (and saved progress) and start over."""
        if self._progress_store is not None:
            self._progress_store.clear()
        self.notice = None
        return self.start_assessment()

    def snapshot(self) -> SavedProgress:
        """Whole-session snapshot suitable for any :class:`ProgressStore`."""
        return self._require_session().to_saved_progress()

    def resume(self, saved: SavedProgress | dict | str) -> StepResult:
        """Restore a previously saved snapshot.

        Corrupt input does not raise: the engine starts a fresh assessment
        and sets :attr:`notice`.
        """
        try:
            session = self._restore(saved)
        except ProgressCorrupt as exc:
            self._recover_from_corrupt(exc)
            return self.current_step()
        self._session = session
        self.notice = None
        logger.info("Assessment resumed at '%s'", session.current_question_id)
        return self.current_step()

    def _restore(self, saved: SavedProgress | dict | str) -> AssessmentSession:
        if isinstance(saved, SavedProgress):
            session = AssessmentSession.from_saved_progress(saved)
        else:
            session = AssessmentSession.from_document(saved)
        # Every id a later retreat or drain can land on must exist in this tree
        referenced = [session.current_question_id, *session.pending_routes]
        for frame in session.history.frames:
            referenced.append(frame.question_id)
            referenced.extend(frame.pending_routes)
        unknown = sorted({qid for qid in referenced if not self._store.has_question(qid)})
        if unknown:
            raise ProgressCorrupt(
                f"Saved progress references unknown question(s): {', '.join(unknown)}"
            )
        return session

    def _recover_from_corrupt(self, exc: Exception) -> None:
        logger.warning("Discarding corrupt saved progress: %s", exc)
        if self._progress_store is not None:
            self._progress_store.clear()
        self.start_assessment()
        self.notice = CORRUPT_PROGRESS_NOTICE

    # ==================================================================
    # Persistence channel
    # ==================================================================

    def save_progress(self) -> SavedProgress:
        """Write the current snapshot to the attached progress store."""
        if self._progress_store is None:
            raise ValueError("No progress store attached")
        saved = self.snapshot()
        self._progress_store.save(saved)
        return saved

    def load_progress(self) -> bool:
        """Load saved progress from the attached store.

        Returns True if a snapshot was restored.  Returns False when nothing
        was saved, or when the saved state was corrupt (a fresh assessment is
        started and :attr:`notice` is set).
        """
        if self._progress_store is None:
            raise ValueError("No progress store attached")
        try:
            saved = self._progress_store.load()
            if saved is None:
                return False
            session = self._restore(saved)
        except ProgressCorrupt as exc:
            self._recover_from_corrupt(exc)
            return False
        self._session = session
        self.notice = None
        logger.info("Assessment loaded at '%s'", session.current_question_id)
        return True

    def has_saved_progress(self) -> bool:
        return self._progress_store is not None and self._progress_store.exists()

    def _autosave(self) -> None:
        if self._progress_store is not None and self._session is not None:
            self._progress_store.save(self._session.to_saved_progress())

    # ==================================================================
    # Answers
    # ==================================================================

    def answer(self, question_id: str, value: Any) -> StepResult:
        """Store an answer and rebuild that question's checklist entries.

        ``None`` clears the answer.  Answering again replaces the previous
        answer and every checklist entry it contributed.  For a fan-out
        question, endpoint items and deselected sub-paths are synced right
        away and deselected routes leave the pending queue; new routes are
        only queued on :meth:`advance`.

        Raises:
            QuestionNotFound: unknown ``question_id``.
            InvalidAnswer: value does not fit the question.
        """
        session = self._require_session()
        question = self._store.get_question(question_id)
        if value is None:
            session.answers.remove(question.id)
            session.checklist.remove_question(question.id)
        else:
            if question.is_endpoint:
                raise InvalidAnswer(f"Question '{question.id}' cannot be answered")
            normalized = question.normalize_answer(value)
            session.answers.set(question.id, normalized)
            session.checklist.apply_answer(question, normalized)
        if self._resolver.is_fan_out(question):
            # Deselected branches are cleaned up as soon as the selection changes
            self._resolver.apply_fan_out_selection(question, session)
        self._autosave()
        return self.current_step()

    def toggle_option(self, question_id: str, option: str, checked: bool | None = None) -> StepResult:
        """Select or deselect one option of a checkbox question.

        With ``checked=None`` the option is flipped.
        """
        session = self._require_session()
        question = self._store.get_question(question_id)
        if not isinstance(question, CheckboxQuestion):
            raise InvalidAnswer(f"Question '{question.id}' is not a checkbox question")
        selected = session.answers.get(question.id) or []
        if not isinstance(selected, list):
            selected = [selected]
        if checked is None:
            checked = option not in selected
        if checked and option not in selected:
            selected.append(option)
        elif not checked:
            selected = [label for label in selected if label != option]
        return self.answer(question.id, selected)

    # ==================================================================
    # Navigation
    # ==================================================================

    def advance(self) -> StepResult:
        """Move forward from the current question.

        Records a history frame, asks the resolver for the next id and moves
        there.  Terminal sentinels and ids missing from the tree end the
        assessment.  Calling this on a completed assessment is a no-op.
        """
        session = self._require_session()
        if session.is_complete:
            return self.current_step()

        question = self._store.get_question(session.current_question_id)
        session.history.push(
            question.id, session.answers.get(question.id), session.pending_routes
        )
        next_id = self._settle(self._resolver.next_question_id(question, session))

        if next_id in TERMINAL_IDS:
            session.terminal = next_id
            logger.info("Assessment complete after '%s' (%s)", question.id, next_id)
        else:
            session.current_question_id = next_id
            logger.debug("Advanced '%s' -> '%s'", question.id, next_id)
        self._autosave()
        return self.current_step()

    def _settle(self, next_id: str) -> str:
        """Turn a routed id into a displayable question id or a sentinel.

        Endpoints are never displayed: their items are injected and routing
        continues from them.  Unknown ids end the assessment.
        """
        session = self._require_session()
        seen: set[str] = set()
        while next_id not in TERMINAL_IDS:
            try:
                target = self._store.get_question(next_id)
            except QuestionNotFound as exc:
                logger.warning("%s; ending assessment", exc)
                return SUMMARY_ID
            if not target.is_endpoint:
                return target.id
            if target.id in seen:
                logger.warning("Endpoint routing loop at '%s'; ending assessment", target.id)
                return SUMMARY_ID
            seen.add(target.id)
            session.checklist.inject_endpoint(target)
            next_id = self._resolver.next_question_id(target, session)
        return next_id

    def retreat(self) -> StepResult:
        """Go back to the previously visited question.

        Restores the question id and the pending-route queue from the popped
        frame.  Answers and checklist entries are left untouched.

        Raises:
            ValueError: if there is no previous question.
        """
        session = self._require_session()
        frame = session.history.pop()
        session.current_question_id = frame.question_id
        session.pending_routes = list(frame.pending_routes)
        session.terminal = None
        logger.debug("Retreated to '%s'", frame.question_id)
        self._autosave()
        return self.current_step()

    def finish(self) -> StepResult:
        """End the assessment from the current question and show the summary."""
        session = self._require_session()
        if not session.is_complete:
            session.history.push(
                session.current_question_id,
                session.answers.get(session.current_question_id),
                session.pending_routes,
            )
            session.terminal = SUMMARY_ID
            logger.info("Assessment finished at '%s'", session.current_question_id)
            self._autosave()
        return self.current_step()

    # ==================================================================
    # Queries
    # ==================================================================

    def is_complete(self) -> bool:
        return self._require_session().is_complete

    def current_question(self) -> Question | None:
        """The question to display, or ``None`` once the assessment is complete."""
        session = self._require_session()
        if session.is_complete:
            return None
        return self._store.get_question(session.current_question_id)

    def current_checklist(self) -> list[ChecklistEntry]:
        return self._require_session().checklist.entries

    def can_retreat(self) -> bool:
        return self._require_session().history.depth > 0

    def progress(self) -> tuple[int, int]:
        """``(position, total)`` where total counts substantive questions."""
        session = self._require_session()
        return session.history.depth + 1, self._store.substantive_question_count

    def navigation(self) -> NavigationState:
        session = self._require_session()
        question = self._store.get_question(session.current_question_id)
        position, total = self.progress()
        is_final = question.type == "summary" or question.routing == SUMMARY_ID
        if is_final:
            can_advance = False
        elif question.type in NON_SUBSTANTIVE_TYPES or isinstance(question.routing, str):
            can_advance = True
        else:
            can_advance = session.answers.is_answered(question.id)
        return NavigationState(
            can_retreat=self.can_retreat(),
            can_advance=can_advance,
            is_final=is_final,
            position=position,
            total=total,
        )

    def summary(self) -> AssessmentSummary:
        session = self._require_session()
        answered = sum(1 for qid in session.answers if session.answers.is_answered(qid))
        return self._summary.build(
            session.checklist.entries,
            terminal=session.terminal,
            questions_answered=answered,
        )

    def current_step(self) -> StepResult:
        """Current step: the question to show, or the completion result."""
        session = self._require_session()
        if session.is_complete:
            return CompletionStep(
                terminal=session.terminal,
                checklist=session.checklist.entries,
                summary=self.summary(),
                notice=self.notice,
            )
        question = self._store.get_question(session.current_question_id)
        return QuestionStep(
            question=to_payload(question),
            answer=session.answers.get(question.id),
            navigation=self.navigation(),
            checklist=session.checklist.entries,
            notice=self.notice,
        )

    # ==================================================================
    # Internals
    # ==================================================================

    def _require_session(self) -> AssessmentSession:
        if self._session is None:
            raise ValueError("Assessment not started: call start_assessment() first")
        return self._session


def to_payload(question: BaseQuestion) -> QuestionPayload:
    """Convert a typed question into the flat payload the UI renders."""
    return QuestionPayload(
        id=question.id,
        text=question.text,
        type=question.type,
        help_text=question.help_text,
        options=list(getattr(question, "options", None) or []) or None,
        content=getattr(question, "content", None),
        multi_select=question.is_multi_select,
    )
