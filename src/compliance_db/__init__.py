"""compliance_db: PostgreSQL persistence layer for compliance assessments.

This package provides the ORM model, async engine factory, and repository
for creating, updating, and querying assessments.  It is designed to be
consumed by the async service in ``compliance_navigator.service`` and the
FastAPI server.
"""

from compliance_db.models.assessment import Assessment
from compliance_db.models.enums import AssessmentStatus
from compliance_db.engine import get_engine, get_session_factory
from compliance_db.repository import AssessmentRepository

__all__ = [
    "Assessment",
    "AssessmentStatus",
    "get_engine",
    "get_session_factory",
    "AssessmentRepository",
]
