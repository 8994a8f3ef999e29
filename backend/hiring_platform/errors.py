"""
Typed API errors and the FastAPI handlers that render them.

Every error reaching the client has the shape
``{"success": false, "message": ..., "retryable": ...}``. ``retryable`` is
True only for transient upstream failures (timeouts, rate limits, provider
outages) so the front end can offer a retry for those and nothing else.
"""
import logging
from dataclasses import dataclass, asdict
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


@dataclass
class FieldError:
    """A single field-level validation message."""
    field: str
    message: str


class APIError(Exception):
    """Base class for errors rendered as structured JSON responses."""
    status_code = 500
    retryable = False
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None, *, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "success": False,
            "message": self.message,
            "retryable": self.retryable,
        }


class ValidationError(APIError):
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors: List[FieldError], message: Optional[str] = None):
        self.errors = errors
        super().__init__(message)

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["errors"] = [asdict(e) for e in self.errors]
        return body


class AuthenticationError(APIError):
    status_code = 401
    default_message = "Not authenticated"


class AuthorizationError(APIError):
    status_code = 403
    default_message = "Not authorized to access this resource"


class NotFoundError(APIError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(APIError):
    status_code = 409
    default_message = "Resource was modified by another request"


class PayloadTooLargeError(APIError):
    status_code = 413
    default_message = "Uploaded file is too large"


class UpstreamServiceError(APIError):
    """The hosted AI provider failed or could not be reached."""
    status_code = 502
    default_message = "AI service request failed"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        retryable: Optional[bool] = None,
    ):
        if retryable is not None:
            self.retryable = retryable
        super().__init__(message, status_code=status_code)


class UpstreamTimeoutError(UpstreamServiceError):
    status_code = 504
    retryable = True
    default_message = "AI service timed out"


class UpstreamRateLimitError(UpstreamServiceError):
    status_code = 503
    retryable = True
    default_message = "AI service is rate limiting requests, try again shortly"


class MalformedResponseError(UpstreamServiceError):
    """The provider answered, but not with the data we asked for."""
    status_code = 502
    retryable = False
    default_message = "AI service returned an unexpected response"


# ============================================================
# HANDLERS
# ============================================================

async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI's 422 request validation failures as 400 field errors."""
    errors = []
    for err in exc.errors():
        # loc is e.g. ("query", "page") or ("body", "title")
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "header")]
        errors.append(FieldError(field=".".join(loc) or "request", message=err.get("msg", "Invalid value")))
    return await api_error_handler(request, ValidationError(errors))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}", exc_info=exc)
    return JSONResponse(status_code=500, content=APIError().to_dict())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
