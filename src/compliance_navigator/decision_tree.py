"""DecisionTreeStore: loads the compliance decision tree into typed models.

This is the single source of truth for question data at runtime.  The store
is loaded once at startup and provides fast lookup by question id.

Usage::

    store = DecisionTreeStore()         # defaults to v1/decision_tree.yaml
    store.load()                        # parse the document

    q = store.get_question("q3_study_type")
    first = store.first_question()

The document is a mapping with a ``metadata`` header and an ordered
``questions`` list.  Both ``.yaml``/``.yml`` and ``.json`` files are accepted.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml
from pydantic import TypeAdapter, ValidationError

from compliance_navigator.constants import (
    FINAL_QUESTION_ID,
    LEGACY_ENDPOINT_QIDS,
    LEGACY_FAN_OUT_QIDS,
    LEGACY_SKIP_RULES,
    NON_SUBSTANTIVE_TYPES,
    TERMINAL_IDS,
)
from compliance_navigator.errors import QuestionNotFound, TreeLoadError
from compliance_navigator.models.question import (
    BaseQuestion,
    CheckboxQuestion,
    Question,
    question_mapper,
)
from compliance_navigator.models.tree import TimelinePhase, TreeMetadata

logger = logging.getLogger(__name__)

_question_adapter: TypeAdapter[Question] = TypeAdapter(Question)


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------

def find_repo_root(start: Optional[Path] = None) -> Path:
    """Walk upwards from *start* to find the repo root (dir with pyproject.toml or .git).

    Falls back to cwd if no marker is found.
    """
    p = (start or Path(__file__).resolve()).parent
    for parent in [p, *p.parents]:
        if (parent / "pyproject.toml").exists() or (parent / ".git").exists():
            return parent
    return Path.cwd()


def load_document(path: Path | str) -> Any:
    """Load a YAML or JSON tree document and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise TreeLoadError(f"Missing decision tree file: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                return json.load(f)
            return yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise TreeLoadError(f"Cannot parse decision tree file {path}: {exc}") from exc


def _apply_legacy_tags(raw: dict) -> dict:
    """Fill role/fanOut/skipWhenOnly from the legacy id lists when untagged."""
    qid = raw.get("id")
    raw = dict(raw)
    if "role" not in raw and qid in LEGACY_ENDPOINT_QIDS:
        raw["role"] = "endpoint"
    if raw.get("type") == "checkbox":
        if "fanOut" not in raw and "fan_out" not in raw and qid in LEGACY_FAN_OUT_QIDS:
            raw["fanOut"] = True
        if (
            "skipWhenOnly" not in raw
            and "skip_when_only" not in raw
            and qid in LEGACY_SKIP_RULES
        ):
            option, target = LEGACY_SKIP_RULES[qid]
            raw["skipWhenOnly"] = {"option": option, "target": target}
    return raw


def routing_targets(question: BaseQuestion) -> list[str]:
    """Every question id ``question`` can route to, in declaration order."""
    targets: list[str] = []
    routing = question.routing
    if isinstance(routing, str):
        targets.append(routing)
    elif isinstance(routing, dict):
        targets.extend(routing.values())
    if isinstance(question, CheckboxQuestion) and question.skip_when_only:
        targets.append(question.skip_when_only.target)
    return targets


# ---------------------------------------------------------------------------
# DecisionTreeStore
# ---------------------------------------------------------------------------

class DecisionTreeStore:
    """Loads the decision tree document and provides typed lookup.

    Attributes populated after :meth:`load`:

        metadata         - TreeMetadata header
        questions        - dict[qid, Question] in document order
        endpoint_ids     - frozenset of injection-only question ids
        sub_question_ids - frozenset of fan-out targets that are displayed

    Args:
        path: tree document; defaults to ``v1/decision_tree.yaml`` under the
            repo root
        strict: raise :class:`TreeLoadError` on dangling routing references
            instead of logging a warning
    """

    def __init__(self, path: str | Path | None = None, *, strict: bool = False) -> None:
        if path is None:
            path = find_repo_root() / "v1" / "decision_tree.yaml"
        self._path = Path(path)
        self._strict = strict

        # Populated by load()
        self.metadata: TreeMetadata = TreeMetadata()
        self.questions: dict[str, Question] = {}
        self.endpoint_ids: frozenset[str] = frozenset()
        self.sub_question_ids: frozenset[str] = frozenset()
        self._loaded = False

    @classmethod
    def from_document(cls, document: dict, *, strict: bool = False) -> "DecisionTreeStore":
        """Build a store from an already-parsed document (tests, embedded data)."""
        store = cls(path=Path("<memory>"), strict=strict)
        store._ingest(document)
        return store

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @property
    def path(self) -> Path:
        return self._path

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self) -> None:
        """Parse the tree document into typed models.

        Call this once at startup.  Raises :class:`TreeLoadError` if the file
        is missing, unparseable, or does not describe a valid tree.
        """
        self._ingest(load_document(self._path))
        logger.info(
            "DecisionTreeStore loaded %s: %d questions (%d endpoints, %d sub-questions)",
            self._path,
            len(self.questions),
            len(self.endpoint_ids),
            len(self.sub_question_ids),
        )

    def _ingest(self, document: Any) -> None:
        if not isinstance(document, dict):
            raise TreeLoadError("Decision tree document must be a mapping")
        raw_questions = document.get("questions")
        if not raw_questions or not isinstance(raw_questions, list):
            raise TreeLoadError("Decision tree document has no questions")

        try:
            self.metadata = TreeMetadata.model_validate(document.get("metadata") or {})
        except ValidationError as exc:
            raise TreeLoadError(f"Invalid tree metadata: {exc}") from exc

        questions: dict[str, Question] = {}
        for index, raw in enumerate(raw_questions):
            if not isinstance(raw, dict):
                raise TreeLoadError(f"Question #{index} is not a mapping")
            qtype = raw.get("type")
            if qtype not in question_mapper:
                raise TreeLoadError(
                    f"Unknown question type '{qtype}' for question '{raw.get('id')}'"
                )
            try:
                q = _question_adapter.validate_python(_apply_legacy_tags(raw))
            except ValidationError as exc:
                raise TreeLoadError(
                    f"Invalid question '{raw.get('id', index)}': {exc}"
                ) from exc
            if q.id in questions:
                raise TreeLoadError(f"Duplicate question id '{q.id}'")
            questions[q.id] = q
        self.questions = questions

        self.endpoint_ids = frozenset(q.id for q in questions.values() if q.is_endpoint)
        self.sub_question_ids = frozenset(self._derive_sub_questions())
        self._check_references()
        self._loaded = True

    def _derive_sub_questions(self) -> Iterable[str]:
        """Displayed targets of fan-out questions: the ones that drain the queue."""
        for q in self.questions.values():
            if not (isinstance(q, CheckboxQuestion) and q.fan_out):
                continue
            if not isinstance(q.routing, dict):
                continue
            for target in q.routing.values():
                if target in self.questions and target not in self.endpoint_ids:
                    yield target

    def _check_references(self) -> None:
        """Report routing targets that are neither questions nor sentinels."""
        dangling = [
            (q.id, target)
            for q in self.questions.values()
            for target in routing_targets(q)
            if target not in self.questions and target not in TERMINAL_IDS
        ]
        for source, target in dangling:
            logger.warning("Question '%s' routes to unknown question '%s'", source, target)
        if dangling and self._strict:
            refs = ", ".join(f"{s} -> {t}" for s, t in dangling)
            raise TreeLoadError(f"Dangling routing references: {refs}")

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    def get_question(self, qid: str) -> Question:
        """Look up a question by id.

        Raises:
            QuestionNotFound: if ``qid`` is not in the tree.
        """
        try:
            return self.questions[qid]
        except KeyError:
            raise QuestionNotFound(qid) from None

    def find_question(self, qid: str) -> Question | None:
        """Like :meth:`get_question` but returns ``None`` for unknown ids."""
        return self.questions.get(qid)

    def has_question(self, qid: str) -> bool:
        return qid in self.questions

    def first_question(self) -> Question:
        """Head of the declared question sequence."""
        if not self.questions:
            raise TreeLoadError("Decision tree not loaded")
        return next(iter(self.questions.values()))

    def final_question(self) -> Question | None:
        """The question whose fixed items close every summary, if present."""
        return self.questions.get(FINAL_QUESTION_ID)

    def is_endpoint(self, qid: str) -> bool:
        return qid in self.endpoint_ids

    def is_sub_question(self, qid: str) -> bool:
        return qid in self.sub_question_ids

    @property
    def timeline_phases(self) -> list[TimelinePhase]:
        return self.metadata.timeline_phases

    @property
    def version(self) -> str | None:
        return self.metadata.version

    @property
    def substantive_question_count(self) -> int:
        """Questions counted for progress display (not info/summary)."""
        return sum(1 for q in self.questions.values() if q.type not in NON_SUBSTANTIVE_TYPES)
