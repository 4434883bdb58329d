"""
HTTP error mapping for the catalog API.

Translates the error taxonomy into JSON responses and routes the real
failure detail to the diagnostic log instead of the caller.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .errors import GENERIC_ERROR_MESSAGE, ListdError, ValidationError


# Configure logging
logger = logging.getLogger(__name__)


def build_error_context(
    operation: str,
    error: BaseException,
    extra: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Build the diagnostic context logged for a failed operation.

    Args:
        operation: Name of the operation that failed
        error: The exception that occurred
        extra: Additional key/value pairs worth recording

    Returns:
        Dictionary with timestamp, operation and error details
    """
    context = {
        'timestamp': datetime.now().isoformat(),
        'operation': operation,
        'error_type': type(error).__name__,
        'error_message': str(error),
    }
    if extra:
        context.update(extra)
    return context


def log_error(
    operation: str,
    error: BaseException,
    extra: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Log an error with its diagnostic context and return the context."""
    context = build_error_context(operation, error, extra)
    logger.error(f"Operation {operation} failed: {context}", exc_info=error)
    return context


async def handle_listd_error(request: Request, exc: ListdError) -> JSONResponse:
    """Map a taxonomy error to its status and caller-visible message."""
    if isinstance(exc, ValidationError):
        logger.info(f"Rejected {request.url.path}: {exc}")
    else:
        log_error(request.url.path, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.public_message},
    )


async def handle_request_validation_error(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Report the first invalid path or query parameter like a ValidationError."""
    first = exc.errors()[0]
    location = first.get("loc") or ()
    field = str(location[-1]) if location else "request"
    return await handle_listd_error(request, ValidationError(field, first.get("msg", "invalid")))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Hide unhandled failures behind the generic message."""
    log_error(request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"message": GENERIC_ERROR_MESSAGE},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error mapping on an application."""
    app.add_exception_handler(ListdError, handle_listd_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
