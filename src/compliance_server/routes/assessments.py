"""Assessment management endpoints: create, get, list, delete, restart.

All endpoints require the ``X-User-ID`` header for user identification.
Assessment identity is the (user_id, assessment_id) pair, enforced by a
unique constraint in the database.
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from compliance_db.models.enums import AssessmentStatus
from compliance_navigator.models.session import AssessmentInfo, StepResult
from compliance_navigator.service import AssessmentService

from compliance_server.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from compliance_server.dependencies import get_db, get_service, get_user_id

router = APIRouter(tags=["assessments"])


class CreateAssessmentRequest(BaseModel):
    """Body for POST /assessments."""
    assessment_id: str


@router.post("/assessments", status_code=201)
async def create_assessment(
    body: CreateAssessmentRequest,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_service),
) -> AssessmentInfo:
    """Create a new assessment positioned on the first question.

    Returns 201 on success, 409 if the (user_id, assessment_id) pair exists.
    """
    return await service.create_assessment(
        db, user_id=user_id, assessment_id=body.assessment_id,
    )


@router.get("/assessments")
async def list_assessments(
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_service),
    status: AssessmentStatus | None = Query(None),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
) -> list[AssessmentInfo]:
    """List the caller's assessments, most recent first."""
    return await service.list_assessments(
        db, user_id=user_id, status=status, limit=limit, offset=offset,
    )


@router.get("/assessments/{assessment_id}")
async def get_assessment(
    assessment_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_service),
) -> AssessmentInfo:
    info = await service.get_assessment(
        db, user_id=user_id, assessment_id=assessment_id,
    )
    if info is None:
        raise ValueError(f"Assessment not found: assessment_id={assessment_id}")
    return info


@router.delete("/assessments/{assessment_id}", status_code=204)
async def delete_assessment(
    assessment_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_service),
) -> None:
    """Permanently delete an assessment.  204 on success, 404 if missing."""
    await service.delete_assessment(
        db, user_id=user_id, assessment_id=assessment_id,
    )


@router.post("/assessments/{assessment_id}/restart")
async def restart_assessment(
    assessment_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_service),
) -> StepResult:
    """Discard all answers and return the first question."""
    return await service.restart(
        db, user_id=user_id, assessment_id=assessment_id,
    )
