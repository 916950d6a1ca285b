"""
Error taxonomy and the single boundary that turns errors into HTTP responses.
Every service calls install_error_handlers(app); callers only ever see
{"error", "error_description"} bodies, never exception text or stack traces.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shop_common.gatekeeper import DenyReason

logger = logging.getLogger(__name__)


class ShopError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "server_error"
    message = "Internal server error"

    def __init__(self, message: str | None = None, *, headers: dict[str, str] | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.headers = headers

    def body(self) -> dict:
        return {"error": self.error, "error_description": self.message}


class AuthenticationFailure(ShopError):
    """Bad credentials, inactive account, or no usable token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error = "invalid_credentials"
    message = "Invalid username or password"

    def __init__(self, message: str | None = None, *, error: str | None = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})
        if error:
            self.error = error


class AuthorizationFailure(ShopError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "insufficient_role"
    message = "Insufficient role for this operation"


class ValidationFailure(ShopError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "invalid_request"
    message = "Invalid request data"

    def __init__(self, message: str | None = None, errors: list[dict] | None = None):
        super().__init__(message)
        self.errors = errors or []

    def body(self) -> dict:
        body = super().body()
        body["errors"] = self.errors
        return body


class Conflict(ShopError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "conflict"
    message = "Resource already exists"


class DuplicateUsername(Conflict):
    message = "Username is already taken"


class DuplicateEmail(Conflict):
    message = "Email is already registered"


class NotFound(ShopError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "not_found"
    message = "Not found"


class RateLimited(ShopError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error = "rate_limited"
    message = "Too many requests; try again later"

    def __init__(self, retry_after: int):
        super().__init__(headers={"Retry-After": str(retry_after)})
        self.retry_after = retry_after


class UpstreamUnavailable(ShopError):
    status_code = status.HTTP_502_BAD_GATEWAY
    error = "bad_gateway"
    message = "Upstream service unavailable"


_DENY_MESSAGES = {
    DenyReason.MISSING_TOKEN: "Authorization header missing",
    DenyReason.MALFORMED: "Malformed token",
    DenyReason.INVALID_SIGNATURE: "Token signature verification failed",
    DenyReason.EXPIRED: "Token expired",
}


def denial_to_error(reason: DenyReason) -> ShopError:
    """Map a gatekeeper deny reason to the error the caller receives."""
    if reason.is_authentication_failure:
        return AuthenticationFailure(_DENY_MESSAGES[reason], error="invalid_token")
    return AuthorizationFailure()


def _field_name(loc) -> str:
    return ".".join(str(part) for part in loc if part != "body") or "body"


async def _shop_error_handler(request: Request, exc: ShopError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.body(), headers=exc.headers)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [{"field": _field_name(e.get("loc", ())), "message": e.get("msg", "")} for e in exc.errors()]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ValidationFailure(errors=errors).body(),
    )


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "http_error", "error_description": detail},
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ShopError().body(),
    )


def install_error_handlers(app: FastAPI) -> None:
    """Register the error boundary on app."""
    app.add_exception_handler(ShopError, _shop_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
