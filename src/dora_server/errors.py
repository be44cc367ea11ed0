"""Global exception handlers — map SDK exceptions to HTTP status codes.

Route handlers and the session registry raise ``ValueError`` for missing
sessions, drafts and forms, and for a full registry.  Rather than catching
these in every route, global handlers inspect the message and pick the
HTTP status code.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

# --- Keyword patterns in ValueError messages and their HTTP status codes ---
# Checked in order; first match wins.
_VALUE_ERROR_PATTERNS: list[tuple[str, int]] = [
    # Session, draft or form id unknown
    ("not found", 404),
    # Duplicate resource
    ("already", 409),
    # Registry at MAX_LIVE_SESSIONS
    ("limit reached", 429),
    # Operation not valid in the current session state
    ("only valid", 400),
]


# --- Client-safe messages keyed by HTTP status code ---
# Internal details (ids, names) stay in the server log; the client
# receives only a generic description.
_SAFE_MESSAGES: dict[int, str] = {
    404: "Resource not found",
    409: "Resource already exists",
    429: "Too many open sessions",
    400: "Invalid request",
}


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Map ``ValueError`` to a contextual HTTP error response.

    The raw exception message is logged server-side but never sent to the
    client.  Unrecognised messages fall back to 400.
    """
    msg = str(exc)
    status = 400
    for pattern, code in _VALUE_ERROR_PATTERNS:
        if pattern in msg.lower():
            status = code
            break

    logger.warning("ValueError [%d] at %s: %s", status, request.url, msg)
    safe_detail = _SAFE_MESSAGES.get(status, "Invalid request")
    return JSONResponse(status_code=status, content={"detail": safe_detail})


async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
    """Map ``KeyError`` (e.g. unknown question or category id) to 404."""
    logger.warning("KeyError at %s: %s", request.url, exc)
    return JSONResponse(status_code=404, content={"detail": "Resource not found"})


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — log full traceback, return 500."""
    logger.exception("Unhandled exception at %s", request.url)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
