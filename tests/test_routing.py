"""Routing tests: fan-out queue, endpoint injection, stale-branch cleanup,
skip rules and normal routing.

Fan-out scenarios run through NavigatorEngine on the small tree in
``helpers/trees.py``; routing-mode details call RouteResolver directly
against the shipped tree.
"""

import logging

import pytest

from compliance_navigator.constants import END_DETERMINATION_ID, SUMMARY_ID
from compliance_navigator.engine import NavigatorEngine
from compliance_navigator.routing import RouteResolver
from compliance_navigator.session import AssessmentSession


@pytest.fixture
def engine(fan_store):
    e = NavigatorEngine(fan_store)
    e.start_assessment()
    return e


def _route(store, qid, answer):
    """Resolve the next id for ``qid`` answered with ``answer``."""
    session = AssessmentSession(current_question_id=qid)
    if answer is not None:
        session.answers.set(qid, answer)
    return RouteResolver(store).next_question_id(store.get_question(qid), session), session


# =====================================================================
# Fan-out queue
# =====================================================================


def test_fan_out_follows_option_order_not_selection_order(engine):
    engine.answer("q1", ["C", "A"])
    engine.advance()
    assert engine.session.current_question_id == "x", "First route should follow option order"
    assert engine.session.pending_routes == ["z"]

    engine.advance()
    assert engine.session.current_question_id == "z", "Leaving x should drain the queue"
    assert engine.session.pending_routes == []

    engine.advance()
    assert engine.session.current_question_id == "conv"


def test_sub_question_drains_queue_before_own_routing(engine):
    """With A and B selected, x leads to y (queued), not to x's own target."""
    engine.answer("q1", ["A", "B"])
    engine.advance()
    assert engine.session.current_question_id == "x"

    engine.advance()
    assert engine.session.current_question_id == "y", "Expected y from the queue, not conv"

    # Queue empty: y follows its own routing
    engine.advance()
    assert engine.session.current_question_id == "other"


def test_all_sub_paths_visited_once(engine):
    engine.answer("q1", ["A", "B", "C"])
    visited = []
    while not engine.is_complete():
        visited.append(engine.session.current_question_id)
        engine.advance()
    assert visited == ["q1", "x", "y", "z", "conv"], f"Unexpected path: {visited}"
    assert engine.session.terminal == SUMMARY_ID


def test_retreat_restores_pending_queue(engine):
    engine.answer("q1", ["A", "B", "C"])
    engine.advance()
    assert engine.session.pending_routes == ["y", "z"]
    engine.advance()
    assert engine.session.current_question_id == "y"
    assert engine.session.pending_routes == ["z"]

    engine.retreat()
    assert engine.session.current_question_id == "x"
    assert engine.session.pending_routes == ["y", "z"], "Queue not restored on retreat"

    engine.retreat()
    assert engine.session.current_question_id == "q1"
    assert engine.session.pending_routes == []


# =====================================================================
# Stale-branch cleanup
# =====================================================================


def test_deselected_sub_question_loses_answer_and_items(engine):
    engine.answer("q1", ["A", "B"])
    engine.advance()
    engine.answer("x", "Yes")
    assert "X yes" in [e.text for e in engine.current_checklist()]

    engine.retreat()
    engine.answer("q1", ["B"])
    engine.advance()

    assert engine.session.current_question_id == "y"
    assert engine.session.answers.get("x") is None, "Stale sub-question answer kept"
    assert "X yes" not in [e.text for e in engine.current_checklist()], (
        "Stale sub-question items kept"
    )


def test_still_selected_sub_question_keeps_answer(engine):
    engine.answer("q1", ["A"])
    engine.advance()
    engine.answer("x", "No")
    engine.retreat()
    engine.answer("q1", ["A", "C"])
    engine.advance()
    assert engine.session.answers.get("x") == "No"
    assert "X no" in [e.text for e in engine.current_checklist()]


def test_cleanup_happens_on_reanswer_without_advancing(engine):
    engine.answer("q1", ["A", "B"])
    engine.advance()
    engine.answer("x", "Yes")
    engine.retreat()

    engine.answer("q1", ["B"])
    assert engine.session.current_question_id == "q1"
    assert engine.session.answers.get("x") is None
    assert "X yes" not in [e.text for e in engine.current_checklist()]


def test_deselecting_from_a_sub_question_drops_queued_routes(engine):
    engine.answer("q1", ["A", "B", "C"])
    engine.advance()
    assert engine.session.pending_routes == ["y", "z"]

    engine.answer("q1", ["A"])
    assert engine.session.current_question_id == "x"
    assert engine.session.pending_routes == [], "Deselected routes still queued"

    engine.advance()
    assert engine.session.current_question_id == "conv", "Deselected branch was visited"


def test_deselecting_drops_routes_from_history_snapshots(engine):
    engine.answer("q1", ["A", "B", "C"])
    engine.advance()
    engine.advance()
    assert engine.session.current_question_id == "y"

    engine.answer("q1", ["A", "B"])
    assert engine.session.pending_routes == []

    engine.retreat()
    assert engine.session.current_question_id == "x"
    assert engine.session.pending_routes == ["y"], "Retreat restored a deselected route"


def test_cleanup_leaves_non_sub_questions_alone(engine):
    """``other`` is reached through y but is not a fan-out target."""
    engine.answer("q1", ["B"])
    engine.advance()
    engine.advance()
    assert engine.session.current_question_id == "other"
    engine.answer("other", "Yes")

    engine.retreat()
    engine.retreat()
    engine.answer("q1", ["A"])
    engine.advance()
    assert engine.session.answers.get("other") == "Yes"


# =====================================================================
# Endpoint injection
# =====================================================================


def test_endpoint_selection_injects_items(engine):
    engine.answer("q1", ["A", "QI"])
    engine.advance()

    assert engine.session.current_question_id == "x", "Endpoint must never be displayed"
    assert engine.session.pending_routes == [], "Endpoint must not be queued"
    entry = next(e for e in engine.current_checklist() if e.text == "Endpoint item")
    assert entry.question_id == "ep"


def test_endpoint_items_follow_the_answer(engine):
    engine.answer("q1", ["QI"])
    assert "Endpoint item" in [e.text for e in engine.current_checklist()], (
        "Endpoint items should appear as soon as the option is selected"
    )

    engine.answer("q1", None)
    assert engine.current_checklist() == []


def test_endpoint_items_not_duplicated_on_repeat(engine):
    engine.answer("q1", ["A", "QI"])
    engine.advance()
    engine.retreat()
    engine.advance()
    texts = [e.text for e in engine.current_checklist()]
    assert texts.count("Endpoint item") == 1, f"Duplicated endpoint item: {texts}"


def test_deselected_endpoint_items_removed(engine):
    engine.answer("q1", ["A", "QI"])
    engine.advance()
    engine.retreat()
    engine.answer("q1", ["A"])
    engine.advance()
    assert "Endpoint item" not in [e.text for e in engine.current_checklist()]


def test_only_endpoints_selected_ends_determination(engine):
    engine.answer("q1", ["QI"])
    engine.advance()

    assert engine.is_complete()
    assert engine.session.terminal == END_DETERMINATION_ID
    assert engine.session.pending_routes == []
    assert [e.text for e in engine.current_checklist()] == ["Endpoint item"]


def test_empty_fan_out_selection_ends_determination(engine):
    engine.answer("q1", [])
    engine.advance()
    assert engine.session.terminal == END_DETERMINATION_ID


def test_shipped_tree_qi_only(store):
    next_id, session = _route(store, "q3_study_type", ["Quality improvement project"])
    assert next_id == END_DETERMINATION_ID
    assert session.checklist.texts() == [
        "Submit a QI / research determination form to the IRB office",
    ]


def test_shipped_tree_fan_out_with_endpoint(store):
    next_id, session = _route(
        store,
        "q3_study_type",
        ["Not sure", "Biospecimen collection or banking", "Retrospective chart review"],
    )
    assert next_id == "q4_retro_phi"
    assert session.pending_routes == ["q6_biospecimen"]
    assert session.checklist.has_text(
        "Schedule a pre-submission consultation with the IRB office"
    )


# =====================================================================
# Skip rule
# =====================================================================


def test_skip_rule_when_only_option_selected(store):
    next_id, _ = _route(store, "q9_oncore", ["None of the above"])
    assert next_id == "q10_final", "Skip rule should bypass OnCore setup"


def test_skip_rule_not_applied_with_other_selections(store):
    next_id, _ = _route(
        store, "q9_oncore", ["None of the above", "Participants receive payments"]
    )
    assert next_id == "q9b_oncore_setup"


def test_skip_rule_not_applied_without_selection(store):
    next_id, _ = _route(store, "q9_oncore", ["Participants receive billable clinical services"])
    assert next_id == "q9b_oncore_setup"


# =====================================================================
# Normal routing
# =====================================================================


@pytest.mark.parametrize(
    "qid, answer, expected",
    [
        ("q1_human_subjects", "Yes", "q2_funding"),
        ("q1_human_subjects", "No", SUMMARY_ID),
        ("q2_funding", "Unfunded", "q3_study_type"),
        ("q10_final", None, SUMMARY_ID),
        # Dict routing without an answer ends the assessment
        ("q1_human_subjects", None, SUMMARY_ID),
        ("q8_data_sharing", [], SUMMARY_ID),
    ],
)
def test_normal_routing(store, qid, answer, expected):
    next_id, _ = _route(store, qid, answer)
    assert next_id == expected, f"{qid}={answer!r} routed to {next_id}"


def test_checkbox_follows_first_selected_option(store, caplog):
    with caplog.at_level(logging.DEBUG, logger="compliance_navigator.routing"):
        next_id, _ = _route(
            store,
            "q8_data_sharing",
            ["With external collaborators", "With a commercial sponsor"],
        )
    assert next_id == "q8b_agreements"
    assert "following first selection" in caplog.text

    next_id, _ = _route(
        store,
        "q8_data_sharing",
        ["With a commercial sponsor", "With external collaborators"],
    )
    assert next_id == "q9_oncore"


def test_non_sub_question_ignores_queue(store):
    session = AssessmentSession(current_question_id="q7_cancer", pending_routes=["q6_observational"])
    session.answers.set("q7_cancer", "No")
    next_id = RouteResolver(store).next_question_id(store.get_question("q7_cancer"), session)
    assert next_id == "q8_data_sharing"
    assert session.pending_routes == ["q6_observational"]
