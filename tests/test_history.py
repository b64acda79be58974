"""HistoryStack and AnswerStore tests."""

import pytest

from compliance_navigator.answers import AnswerStore
from compliance_navigator.history import HistoryStack


class TestHistoryStack:
    def test_push_pop_is_lifo(self):
        h = HistoryStack()
        h.push("a", "Yes", [])
        h.push("b", ["x", "y"], ["c"])
        assert h.depth == 2
        assert h.visited_ids() == ["a", "b"]

        frame = h.pop()
        assert frame.question_id == "b"
        assert frame.answer == ["x", "y"]
        assert frame.pending_routes == ["c"]
        assert h.pop().question_id == "a"
        assert not h

    def test_pop_empty_raises(self):
        with pytest.raises(ValueError, match="No previous question"):
            HistoryStack().pop()

    def test_push_copies_queue(self):
        queue = ["y", "z"]
        h = HistoryStack()
        h.push("x", None, queue)
        queue.pop(0)
        assert h.peek().pending_routes == ["y", "z"], "Frame must hold a snapshot"

    def test_frames_are_copies(self):
        h = HistoryStack()
        h.push("a", ["one"], ["b"])
        h.frames[0].pending_routes.append("mutated")
        assert h.peek().pending_routes == ["b"]

    def test_drop_pending_filters_every_frame(self):
        h = HistoryStack()
        h.push("q1", ["A"], [])
        h.push("x", "Yes", ["y", "z"])
        h.push("y", None, ["z"])
        h.drop_pending(["z"])
        assert [f.pending_routes for f in h.frames] == [[], ["y"], []]

    def test_clear(self):
        h = HistoryStack()
        h.push("a", None, [])
        h.clear()
        assert len(h) == 0
        assert h.peek() is None


class TestAnswerStore:
    def test_get_returns_copies(self):
        store = AnswerStore({"q": ["a"]})
        store.get("q").append("b")
        assert store.get("q") == ["a"]

    def test_is_answered(self):
        store = AnswerStore()
        store.set("single", "Yes")
        store.set("multi", [])
        assert store.is_answered("single")
        assert not store.is_answered("multi"), "Empty selection is unanswered"
        assert not store.is_answered("missing")

    def test_remove(self):
        store = AnswerStore({"q": "Yes"})
        assert store.remove("q") is True
        assert store.remove("q") is False
        assert "q" not in store

    def test_to_dict_is_deep_copy(self):
        store = AnswerStore({"q": ["a"]})
        dumped = store.to_dict()
        dumped["q"].append("b")
        assert store.get("q") == ["a"]
