"""Exception handlers mapping crudcore errors to JSON error envelopes."""

import uuid

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..errors import ErrorDefinitionError, ManagerConfigError, StructuredError, ValidationError
from ..managers.response_manager import ResponseManager
from ..utils.logging import get_logger

logger = get_logger(__name__)


async def structured_error_handler(request: Request, exc: StructuredError) -> JSONResponse:
    """User-facing outcome: render the error object with its own status."""
    logger.info("%s %s -> %s %s", request.method, request.url.path, exc.status, exc.code)
    return ResponseManager().errors([exc], exc.status_code)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed query/path/body parameters use the data validation error."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"The {location or 'request'} parameter is invalid: {error.get('msg')}")
    error = ValidationError.from_messages(messages or ["The request is invalid."])
    return ResponseManager().errors([error], error.status_code)


async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Configuration defects: log everything, leak nothing."""
    trace_id = str(uuid.uuid4())[:8]
    logger.error(
        "Internal error [%s] on %s %s: %s",
        trace_id,
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
    )
    return ResponseManager().errors(
        [{"status": "500", "title": "Internal server error", "meta": {"trace_id": trace_id}}],
        500,
    )


def setup_error_handling(app) -> None:
    """Register crudcore exception handlers on a FastAPI app."""
    app.add_exception_handler(StructuredError, structured_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ManagerConfigError, internal_error_handler)
    app.add_exception_handler(ErrorDefinitionError, internal_error_handler)
