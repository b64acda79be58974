"""ORM models for compliance_db."""

from compliance_db.models.base import Base
from compliance_db.models.enums import AssessmentStatus
from compliance_db.models.assessment import Assessment

__all__ = ["Base", "AssessmentStatus", "Assessment"]
