"""Decision tree endpoints: metadata, timeline phases, and questions.

Read-only views of the loaded tree.  They don't require authentication
since the tree is public reference information.
"""

from fastapi import APIRouter, Depends

from compliance_navigator.decision_tree import DecisionTreeStore
from compliance_navigator.engine import to_payload
from compliance_navigator.models.session import QuestionPayload
from compliance_navigator.models.tree import TimelinePhase

from compliance_server.dependencies import get_store

router = APIRouter(prefix="/tree", tags=["tree"])


@router.get("/metadata")
def get_metadata(store: DecisionTreeStore = Depends(get_store)) -> dict:
    """Tree header plus question counts."""
    return {
        "title": store.metadata.title,
        "version": store.metadata.version,
        "last_updated": store.metadata.last_updated,
        "question_count": len(store.questions),
        "substantive_question_count": store.substantive_question_count,
    }


@router.get("/phases")
def list_phases(store: DecisionTreeStore = Depends(get_store)) -> list[TimelinePhase]:
    return store.timeline_phases


@router.get("/questions")
def list_questions(store: DecisionTreeStore = Depends(get_store)) -> list[QuestionPayload]:
    """Displayable questions in document order (endpoints excluded)."""
    return [to_payload(q) for q in store.questions.values() if not q.is_endpoint]
