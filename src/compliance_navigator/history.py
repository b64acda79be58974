"""HistoryStack: the questions visited so far, with queue snapshots.

Each frame records the question id, its answer when the user moved forward,
and a copy of the pending-route queue as it stood while that question was
current.  Popping a frame lets the engine restore both exactly.
"""

from __future__ import annotations

from typing import Iterable

from compliance_navigator.models.question import Answer
from compliance_navigator.models.state import HistoryFrame


class HistoryStack:
    def __init__(self, frames: Iterable[HistoryFrame] | None = None) -> None:
        self._frames: list[HistoryFrame] = [f.model_copy(deep=True) for f in frames or []]

    def push(self, question_id: str, answer: Answer | None, pending_routes: list[str]) -> HistoryFrame:
        frame = HistoryFrame(
            question_id=question_id,
            answer=list(answer) if isinstance(answer, list) else answer,
            pending_routes=list(pending_routes),
        )
        self._frames.append(frame)
        return frame

    def pop(self) -> HistoryFrame:
        """Remove and return the most recent frame.

        Raises:
            ValueError: if the stack is empty.
        """
        if not self._frames:
            raise ValueError("No previous question to return to")
        return self._frames.pop()

    def peek(self) -> HistoryFrame | None:
        return self._frames[-1] if self._frames else None

    def drop_pending(self, question_ids: Iterable[str]) -> None:
        """Remove ``question_ids`` from every frame's queue snapshot."""
        dropped = set(question_ids)
        for frame in self._frames:
            frame.pending_routes = [r for r in frame.pending_routes if r not in dropped]

    def clear(self) -> None:
        self._frames.clear()

    @property
    def depth(self) -> int:
        return len(self._frames)

    @property
    def frames(self) -> list[HistoryFrame]:
        return [f.model_copy(deep=True) for f in self._frames]

    def visited_ids(self) -> list[str]:
        return [f.question_id for f in self._frames]

    def __len__(self) -> int:
        return len(self._frames)

    def __bool__(self) -> bool:
        return bool(self._frames)
