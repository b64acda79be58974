"""Global exception handlers: map SDK exceptions to HTTP status codes.

The SDK raises ``ValueError`` for various conditions (assessment not found,
duplicate assessment, invalid answer, no previous question).  Rather than
catching these in every route, we install global handlers that inspect the
message and pick the right HTTP status code.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from compliance_navigator.errors import InvalidAnswer

logger = logging.getLogger(__name__)

# --- Keyword patterns in ValueError messages and their HTTP status codes ---
# Checked in order; first match wins.
_VALUE_ERROR_PATTERNS: list[tuple[str, int]] = [
    # Assessment already exists (unique user_id + assessment_id)
    ("already exists", 409),
    # Answering an assessment that already reached its summary
    ("already completed", 409),
    ("not found", 404),
]


# --- Client-safe messages keyed by HTTP status code ---
# Internal details (user_id, assessment_id) stay in the server log.
_SAFE_MESSAGES: dict[int, str] = {
    404: "Resource not found",
    409: "Conflict with current assessment state",
    400: "Invalid request",
}


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Map SDK ``ValueError`` to a contextual HTTP error response.

    Falls back to 400 for unrecognised messages.  ``InvalidAnswer`` messages
    only name the question and option, so they are passed to the client;
    every other raw message stays server-side.
    """
    msg = str(exc)
    status = 400  # default
    for pattern, code in _VALUE_ERROR_PATTERNS:
        if pattern in msg.lower():
            status = code
            break

    logger.warning("ValueError [%d] at %s: %s", status, request.url, msg)
    if isinstance(exc, InvalidAnswer):
        return JSONResponse(status_code=400, content={"detail": msg})
    safe_detail = _SAFE_MESSAGES.get(status, "Invalid request")
    return JSONResponse(status_code=status, content={"detail": safe_detail})


async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
    """Map ``KeyError`` (e.g. unknown question id) to 404."""
    logger.warning("KeyError at %s: %s", request.url, exc)
    return JSONResponse(status_code=404, content={"detail": "Resource not found"})


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions: log full traceback, return 500."""
    logger.exception("Unhandled exception at %s", request.url)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
