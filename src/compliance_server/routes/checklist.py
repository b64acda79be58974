"""Checklist endpoints: the live checklist and the end-of-assessment summary."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from compliance_navigator.models.checklist import ChecklistEntry
from compliance_navigator.models.summary import AssessmentSummary
from compliance_navigator.service import AssessmentService

from compliance_server.dependencies import get_db, get_service, get_user_id

router = APIRouter(tags=["checklist"])


@router.get("/assessments/{assessment_id}/checklist")
async def get_checklist(
    assessment_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_service),
) -> list[ChecklistEntry]:
    """Current checklist entries, sorted by order."""
    return await service.get_checklist(
        db, user_id=user_id, assessment_id=assessment_id,
    )


@router.get("/assessments/{assessment_id}/summary")
async def get_summary(
    assessment_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_service),
) -> AssessmentSummary:
    """Checklist grouped by phase and track, with a timeline estimate."""
    return await service.get_summary(
        db, user_id=user_id, assessment_id=assessment_id,
    )
