"""Abstract persistence channel for assessment progress.

A ``ProgressStore`` holds at most one :class:`SavedProgress` snapshot.  The
engine writes through it after every state change and reads it back on
:meth:`NavigatorEngine.load_progress`.

Concrete implementations live in :mod:`compliance_navigator.storage`.  The
multi-user REST service persists snapshots through ``compliance_db`` instead,
one row per assessment.

Typical integration flow::

    progress = JsonFileProgressStore("~/.navigator/progress.json")
    engine = NavigatorEngine(store, progress_store=progress)
    if engine.has_saved_progress():
        engine.load_progress()
    else:
        engine.start_assessment()
"""

from abc import ABC, abstractmethod

from compliance_navigator.errors import ProgressCorrupt
from compliance_navigator.models.state import SavedProgress


class ProgressStore(ABC):
    """Interface for a single-slot progress store."""

    @abstractmethod
    def save(self, progress: SavedProgress) -> None:
        """Persist ``progress``, replacing any previous snapshot."""
        ...

    @abstractmethod
    def load(self) -> SavedProgress | None:
        """Return the stored snapshot, or ``None`` if nothing was saved.

        Raises
        ------
        ProgressCorrupt
            The stored content exists but cannot be parsed.
        """
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored snapshot.  A no-op when nothing is stored."""
        ...

    def exists(self) -> bool:
        """True when something is stored, even if it turns out to be corrupt."""
        try:
            return self.load() is not None
        except ProgressCorrupt:
            return True
