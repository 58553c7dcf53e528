import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException

from app.api.utils.response_payloads import error_response

logger = logging.getLogger("app")


class PersistenceError(Exception):
    """
    Raised when a write to the database fails.

    The driver/ORM error is chained as ``__cause__`` so operators can see it in
    the logs; callers only ever see this type.
    """

    def __init__(self, detail: str = "Failed to persist record"):
        self.detail = detail
        super().__init__(detail)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Turn request decoding errors (missing or malformed form fields) into a 400.

    Args:
        request (Request): The incoming HTTP request.
        exc (RequestValidationError): The validation error raised by FastAPI/Pydantic.

    Returns:
        JSONResponse: Standardized error response containing field-level validation messages.
    """
    errors = {}
    for err in exc.errors():
        loc = str(err["loc"][-1]) if err.get("loc") else "body"
        msg = err["msg"]
        if msg.startswith("Value error,"):
            msg = msg.replace("Value error,", "").strip()
        errors.setdefault(loc, []).append(msg)

    logger.info(
        "Rejected %s %s: %s",
        request.method,
        request.url.path,
        ", ".join(sorted(errors)),
    )

    return error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        message="Validation failed",
        error="VALIDATION_ERROR",
        errors=errors,
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Handle HTTP exceptions (4xx/5xx) and return a standardized JSON response.

    Covers both routing errors raised by Starlette (404, 405) and
    ``fastapi.HTTPException`` raised by handlers and dependencies.

    Args:
        request (Request): The incoming HTTP request.
        exc (HTTPException): The HTTP exception raised by Starlette or FastAPI.

    Returns:
        JSONResponse: Standardized error response with HTTP status code and message.
    """
    logger.warning(f"HTTP exception: {exc.detail} ({exc.status_code})")

    response = error_response(
        status_code=exc.status_code,
        error="HTTP_ERROR",
        message=str(exc.detail),
    )

    if exc.headers:
        response.headers.update(exc.headers)

    return response


async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle uncaught exceptions and return a standardized JSON response.

    Args:
        request (Request): The incoming HTTP request.
        exc (Exception): The unhandled exception.

    Returns:
        JSONResponse: Standardized 500 error response.
    """
    logger.exception(f"Unhandled exception: {exc}")

    return error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        error="INTERNAL_SERVER_ERROR",
        message="Internal server error",
    )
