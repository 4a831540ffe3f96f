import logging
import traceback
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError
from repairhub.config import settings
from repairhub.utils.exceptions import AppException, ErrorCode

logger = logging.getLogger(__name__)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle all AppException subclasses (our custom exceptions)."""
    detail = exc.detail
    content = {
        "success": False,
        "message": detail.get("message", "An error occurred"),
        "error": detail.get("error", {"code": ErrorCode.INTERNAL_SERVER_ERROR}),
    }
    content.update(detail.get("extra") or {})
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {content['message']}")
    return JSONResponse(status_code=exc.status_code, content=content)


def format_validation_errors(errors: list[dict]) -> list[dict]:
    """
    Flatten Pydantic error dicts into [{field, message}].
    loc is a tuple like ("body", "driverInfo", "name").
    """
    details = []
    for error in errors:
        loc = error.get("loc", [])
        field = ".".join(str(l) for l in loc if l != "body") if loc else "unknown"
        details.append({
            "field": field or "body",
            "message": error.get("msg", "Invalid value"),
        })
    return details


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle Pydantic request validation errors.
    Every failing field is reported, not just the first one.
    """
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": "Validation error. Please check your input.",
            "error": {
                "code": ErrorCode.VALIDATION_ERROR,
                "details": format_validation_errors(exc.errors()),
                "field": None,
            }
        }
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """
    Handle SQLAlchemy IntegrityError (unique constraint violations, FK violations).
    Reached only when a concurrent write beats a service-level uniqueness check.
    """
    logger.warning(f"IntegrityError on {request.method} {request.url.path}: {exc.orig}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": "A record with this data already exists.",
            "error": {
                "code": ErrorCode.DUPLICATE_ENTRY,
                "details": None,
                "field": None,
            }
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all handler for unexpected exceptions.
    Logs the full traceback; the client only sees the exception text in development.
    """
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}\n"
        f"{traceback.format_exc()}"
    )
    message = "An unexpected error occurred. Please try again later."
    if settings.is_development:
        message = f"{message} ({type(exc).__name__}: {exc})"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "message": message,
            "error": {
                "code": ErrorCode.INTERNAL_SERVER_ERROR,
                "details": None,
                "field": None,
            }
        }
    )
