"""RouteResolver: decides which question follows the one being left.

Three routing modes, checked in this order:

  1. Fan-out (checkbox with ``fanOut``): each selected option routes to its
     own sub-path.  Targets are collected in the question's declared option
     order.  Endpoint targets are injected into the checklist instead of
     being visited.  The first target is returned and the rest become the
     pending-route queue.  The selection side effects (endpoint items,
     cleanup of deselected sub-paths) are also applied by the engine every
     time the fan-out answer changes, through
     :meth:`RouteResolver.apply_fan_out_selection`.
  2. Skip rule (checkbox with ``skipWhenOnly``): when the rule's option is
     the only selection, jump to the rule's target.
  3. Normal routing: absent -> ``summary``, a fixed id, or option -> id
     (first selected option for checkbox answers).

After normal routing, leaving a sub-question with a non-empty queue drains
the queue's front instead, so every fanned-out path is visited before the
paths converge.

The resolver mutates the session it is given (queue, stale answers and
checklist entries) but never moves the current position; that is the
engine's job.
"""

from __future__ import annotations

import logging

from compliance_navigator.constants import END_DETERMINATION_ID, SUMMARY_ID
from compliance_navigator.decision_tree import DecisionTreeStore
from compliance_navigator.models.question import Answer, BaseQuestion, CheckboxQuestion
from compliance_navigator.session import AssessmentSession

logger = logging.getLogger(__name__)


class RouteResolver:
    """Computes next-question ids against a loaded :class:`DecisionTreeStore`."""

    def __init__(self, store: DecisionTreeStore) -> None:
        self._store = store

    def next_question_id(self, question: BaseQuestion, session: AssessmentSession) -> str:
        """Return the id that follows ``question`` given the session's answers.

        The result may be a question id, ``summary`` or ``end_determination``.
        Ids that are not in the tree are returned verbatim; the engine treats
        them as terminal.
        """
        answer = session.answers.get(question.id)

        if self.is_fan_out(question):
            return self._resolve_fan_out(question, session)

        skip_target = self._skip_target(question, answer)
        if skip_target is not None:
            logger.debug("Skip rule on '%s' routes to '%s'", question.id, skip_target)
            return skip_target

        next_id = self._resolve_normal(question, answer)

        if session.pending_routes and self._store.is_sub_question(question.id):
            drained = session.pending_routes.pop(0)
            logger.debug(
                "Leaving sub-question '%s': draining pending route '%s' (%d left)",
                question.id, drained, len(session.pending_routes),
            )
            return drained

        return next_id

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------

    @staticmethod
    def is_fan_out(question: BaseQuestion) -> bool:
        return (
            isinstance(question, CheckboxQuestion)
            and question.fan_out
            and isinstance(question.routing, dict)
        )

    def apply_fan_out_selection(
        self, question: CheckboxQuestion, session: AssessmentSession
    ) -> list[str]:
        """Sync the session with the fan-out question's current selection.

        Injects the items of selected endpoints, clears sub-questions and
        endpoint items that no selected option routes to, and returns the
        displayed targets in option order.  Deselected targets are dropped
        from the pending queue and from the history snapshots; nothing is
        added to the queue here.
        """
        routing: dict[str, str] = question.routing  # type: ignore[assignment]
        answer = session.answers.get(question.id)
        selected = set(answer if isinstance(answer, list) else [answer] if answer else [])

        routes: list[str] = []
        routed_endpoints: set[str] = set()
        for option in question.options:
            if option not in selected:
                continue
            target = routing.get(option)
            if not target:
                continue
            if self._store.is_endpoint(target):
                session.checklist.inject_endpoint(self._store.get_question(target))
                routed_endpoints.add(target)
            elif target not in routes:
                routes.append(target)

        # Sub-paths no longer selected lose their answers, entries and queue slots
        deselected: set[str] = set()
        for target in routing.values():
            if self._store.is_sub_question(target) and target not in routes:
                deselected.add(target)
                dropped_answer = session.answers.remove(target)
                dropped_items = session.checklist.remove_question(target)
                if dropped_answer or dropped_items:
                    logger.debug(
                        "Cleared deselected sub-question '%s' (%d checklist item(s))",
                        target, dropped_items,
                    )
            elif self._store.is_endpoint(target) and target not in routed_endpoints:
                session.checklist.remove_question(target)
        if deselected:
            session.pending_routes = [r for r in session.pending_routes if r not in deselected]
            session.history.drop_pending(deselected)
        return routes

    def _resolve_fan_out(self, question: CheckboxQuestion, session: AssessmentSession) -> str:
        routes = self.apply_fan_out_selection(question, session)
        if not routes:
            session.pending_routes = []
            logger.debug("Fan-out '%s' has no displayed routes: end of determination", question.id)
            return END_DETERMINATION_ID

        session.pending_routes = routes[1:]
        logger.debug(
            "Fan-out '%s' routes to %s, pending %s", question.id, routes[0], routes[1:]
        )
        return routes[0]

    # ------------------------------------------------------------------
    # Skip rule and normal routing
    # ------------------------------------------------------------------

    @staticmethod
    def _skip_target(question: BaseQuestion, answer: Answer | None) -> str | None:
        if not isinstance(question, CheckboxQuestion) or question.skip_when_only is None:
            return None
        rule = question.skip_when_only
        if answer == [rule.option]:
            return rule.target
        return None

    @staticmethod
    def _resolve_normal(question: BaseQuestion, answer: Answer | None) -> str:
        routing = question.routing
        if routing is None:
            return SUMMARY_ID
        if isinstance(routing, str):
            return routing

        if isinstance(answer, list):
            if not answer:
                return SUMMARY_ID
            targets = {routing[label] for label in answer if label in routing}
            if len(targets) > 1:
                logger.debug(
                    "Question '%s': selections map to %d targets, following first selection '%s'",
                    question.id, len(targets), answer[0],
                )
            return routing.get(answer[0], SUMMARY_ID)

        if answer is None:
            return SUMMARY_ID
        return routing.get(answer, SUMMARY_ID)
