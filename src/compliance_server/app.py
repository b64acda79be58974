"""Navigator HTTP server: app factory, startup and the ``navigator-server`` CLI.

Startup loads the decision tree once; a tree that fails to load or
validate stops the server before it accepts requests, so no assessment is
ever routed against a broken tree.  Every request then shares the same
read-only :class:`DecisionTreeStore` and :class:`AssessmentService`.

Run with ``navigator-server`` or ``uvicorn compliance_server.app:app``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from compliance_db.engine import dispose_engine, ping_database
from compliance_navigator.decision_tree import DecisionTreeStore
from compliance_navigator.errors import TreeLoadError
from compliance_navigator.service import AssessmentService

from compliance_server.config import ServerSettings, load_settings
from compliance_server.errors import (
    generic_error_handler,
    key_error_handler,
    value_error_handler,
)
from compliance_server.routes import register_routes

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


def _load_tree(settings: ServerSettings) -> DecisionTreeStore:
    store = DecisionTreeStore(settings.tree_path, strict=settings.strict_tree)
    try:
        store.load()
    except TreeLoadError:
        logger.critical(
            "Decision tree %s could not be loaded; refusing to start",
            settings.tree_path or "(bundled v1)",
        )
        raise
    logger.info(
        "Decision tree '%s' v%s loaded (%d questions)",
        store.metadata.title, store.version, len(store.questions),
    )
    return store


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    store = _load_tree(app.state.settings)
    app.state.store = store
    app.state.service = AssessmentService(store)

    yield

    # Rows are written per request, so only the pool needs closing
    await dispose_engine()


def create_app(settings: ServerSettings | None = None) -> FastAPI:
    """Build the navigator API.

    ``settings`` defaults to :func:`load_settings` (``SERVER_*`` env vars).
    Tests pass their own and override ``get_db`` / ``get_service``.
    """
    settings = settings or load_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Research Compliance Navigator API",
        description="Walk a research project through the compliance decision tree "
        "and collect the resulting checklist and timeline",
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # InvalidAnswer, ProgressCorrupt and TreeLoadError are ValueErrors;
    # QuestionNotFound is a KeyError
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(KeyError, key_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    @app.get("/health")
    async def health() -> dict:
        """Database reachability plus the tree version assessments run against."""
        store: DecisionTreeStore | None = getattr(app.state, "store", None)
        tree_version = store.version if store is not None else None
        try:
            await ping_database()
        except Exception as exc:
            logger.error("Health check: database unreachable: %s", exc)
            return {"status": "error", "tree_version": tree_version, "detail": str(exc)}
        return {"status": "ok", "tree_version": tree_version}

    register_routes(app)
    return app


# ASGI target for ``uvicorn compliance_server.app:app``
app = create_app()


def cli() -> None:
    """``navigator-server`` console script."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "compliance_server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
