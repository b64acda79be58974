"""Step endpoints: read the current step, answer, and navigate.

Answering and moving are separate calls: ``/answer`` stores an answer and
rebuilds the checklist without moving, ``/advance`` and ``/retreat`` move
through the tree, ``/finish`` jumps to the summary.  Every endpoint returns
the resulting step (``question`` or ``completed``).
"""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from compliance_navigator.models.session import StepResult
from compliance_navigator.service import AssessmentService

from compliance_server.dependencies import get_db, get_service, get_user_id

router = APIRouter(tags=["steps"])


class SubmitAnswerRequest(BaseModel):
    """Body for POST /assessments/{assessment_id}/answer.

    ``question_id`` defaults to the current question.  ``value`` is an
    option label, or a list of labels for checkbox questions; ``null``
    clears the answer.
    """
    question_id: str | None = None
    value: Any = None


@router.get("/assessments/{assessment_id}/step")
async def get_current_step(
    assessment_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_service),
) -> StepResult:
    return await service.get_current_step(
        db, user_id=user_id, assessment_id=assessment_id,
    )


@router.post("/assessments/{assessment_id}/answer")
async def submit_answer(
    assessment_id: str,
    body: SubmitAnswerRequest,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_service),
) -> StepResult:
    """Store an answer.  400 if the value does not fit the question."""
    return await service.submit_answer(
        db,
        user_id=user_id,
        assessment_id=assessment_id,
        question_id=body.question_id,
        value=body.value,
    )


@router.post("/assessments/{assessment_id}/advance")
async def advance(
    assessment_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_service),
) -> StepResult:
    return await service.advance(
        db, user_id=user_id, assessment_id=assessment_id,
    )


@router.post("/assessments/{assessment_id}/retreat")
async def retreat(
    assessment_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_service),
) -> StepResult:
    """Go back one question.  400 when already on the first question."""
    return await service.retreat(
        db, user_id=user_id, assessment_id=assessment_id,
    )


@router.post("/assessments/{assessment_id}/finish")
async def finish(
    assessment_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_service),
) -> StepResult:
    return await service.finish(
        db, user_id=user_id, assessment_id=assessment_id,
    )
