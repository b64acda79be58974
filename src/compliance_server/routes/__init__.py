"""Route registration: mounts all routers under ``/api/v1``."""

from fastapi import FastAPI

from compliance_server.routes.assessments import router as assessments_router
from compliance_server.routes.checklist import router as checklist_router
from compliance_server.routes.steps import router as steps_router
from compliance_server.routes.tree import router as tree_router

API_PREFIX = "/api/v1"


def register_routes(app: FastAPI) -> None:
    """Include all sub-routers under the versioned API prefix."""
    app.include_router(assessments_router, prefix=API_PREFIX)
    app.include_router(steps_router, prefix=API_PREFIX)
    app.include_router(checklist_router, prefix=API_PREFIX)
    app.include_router(tree_router, prefix=API_PREFIX)
