"""Navigator constants shared across the SDK.

These values are referenced by the decision tree store, the route resolver,
the checklist accumulator and the summary builder.  They mirror conventions
encoded in the decision tree document under ``v1/``.

Several constants can be overridden via environment variables so that
deployments can reuse the engine with a differently-named tree without code
changes.
"""

import os


def _env_list(name: str, default: str) -> list[str]:
    """Read a comma-separated list from the environment."""
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


# Terminal sentinels: "no further question, render the accumulated checklist".
SUMMARY_ID = "summary"
END_DETERMINATION_ID = "end_determination"
TERMINAL_IDS: frozenset[str] = frozenset({SUMMARY_ID, END_DETERMINATION_ID})

# Checklist items without an explicit ``order`` sink to the bottom.
MISSING_ORDER = 999

# Items without a ``phase`` are grouped under the regulatory review phase,
# items without a ``track`` under the trailing "Z" track.
DEFAULT_PHASE = 2
DEFAULT_TRACK = "Z"

# Question whose fixed items are always appended to the summary.
# Overridable via FINAL_QUESTION_ID env var.
FINAL_QUESTION_ID = os.getenv("FINAL_QUESTION_ID", "q10_final")

# Question types that never take an answer and are not counted as
# substantive questions for progress display.
NON_SUBSTANTIVE_TYPES: set[str] = {"info", "summary"}

# Question types whose answer is a list of option labels.
MULTI_SELECT_TYPES: set[str] = {"checkbox"}

# ---------------------------------------------------------------------------
# Legacy tags
# ---------------------------------------------------------------------------
# Documents exported before role/fanOut/skipWhenOnly tags existed encode
# these behaviours by question id.  The loader applies these defaults only
# when the document itself carries no tag for the question.

LEGACY_FAN_OUT_QIDS: list[str] = _env_list("LEGACY_FAN_OUT_QIDS", "q3_study_type")
LEGACY_ENDPOINT_QIDS: list[str] = _env_list(
    "LEGACY_ENDPOINT_QIDS", "q_qi,q_contact_irb"
)
# qid -> (only-selected option, target qid)
LEGACY_SKIP_RULES: dict[str, tuple[str, str]] = {
    "q9_oncore": ("None of the above", FINAL_QUESTION_ID),
}

# ---------------------------------------------------------------------------
# Timeline estimate
# ---------------------------------------------------------------------------
# Each rule fires when any checklist item text contains one of its keywords.
# ``months`` is added to the base estimate when the rule fires.

BASE_TIMELINE_MONTHS = 1.0
IRB_REVIEW_LINE = ("IRB Review", "2-6 weeks depending on review type")

TIMELINE_RULES: list[dict] = [
    {
        "label": "Cancer Center Reviews",
        "keywords": ["PRMC", "Cancer Center"],
        "estimate": "2-3 months",
        "months": 2.5,
    },
    {
        "label": "IND Preparation & FDA Review",
        "keywords": ["IND"],
        "estimate": "3-6 months",
        "months": 4.0,
    },
    {
        "label": "Grant Submission",
        "keywords": ["ORA"],
        "estimate": "Allow 5 days before sponsor deadline",
        "months": 0.0,
    },
]
