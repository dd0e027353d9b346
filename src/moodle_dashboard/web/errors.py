"""Error envelopes and exception handlers of the HTTP service."""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..auth import COOKIE_NAME
from ..moodle import (
    MoodleAPIError,
    MoodleAuthError,
    MoodleNetworkError,
    MoodleNotFoundError,
    MoodleValidationError,
)
from ..utils.logging import get_logger

logger = get_logger(__name__)


class NotAuthenticated(Exception):
    """The request carries no valid session cookie."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)
        self.message = message


def error_response(status_code: int, error: str, message: str | None = None) -> JSONResponse:
    body = {"success": False, "error": error}
    if message is not None:
        body["message"] = message
    return JSONResponse(body, status_code=status_code)


def moodle_error_status(error: MoodleAPIError) -> int:
    if isinstance(error, MoodleNetworkError):
        return 503
    if isinstance(error, MoodleAuthError):
        return 401
    if isinstance(error, MoodleNotFoundError):
        return 404
    if isinstance(error, MoodleValidationError):
        return 400
    return 502


def describe_validation_error(error: dict[str, Any]) -> str:
    """One pydantic error as ``field: message``, e.g. ``baseUrl: Field required``."""
    loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "form")]
    if not loc:
        return error.get("msg", "Invalid value")
    return f"{'.'.join(loc)}: {error.get('msg', 'Invalid value')}"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(MoodleAPIError)
    async def handle_moodle_error(request: Request, exc: MoodleAPIError) -> JSONResponse:
        status = moodle_error_status(exc)
        logger.warning(f"{request.method} {request.url.path} -> {status}: {exc}")
        response = error_response(status, str(exc))

        # The token was revoked or expired: the session ends here
        if isinstance(exc, MoodleAuthError) and COOKIE_NAME in request.cookies:
            request.app.state.sessions.discard(request.cookies[COOKIE_NAME])
            response.delete_cookie(COOKIE_NAME)
        return response

    @app.exception_handler(NotAuthenticated)
    async def handle_not_authenticated(request: Request, exc: NotAuthenticated) -> JSONResponse:
        response = error_response(401, exc.message)
        if COOKIE_NAME in request.cookies:
            response.delete_cookie(COOKIE_NAME)
        return response

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = "; ".join(describe_validation_error(e) for e in exc.errors())
        logger.info(f"{request.method} {request.url.path} -> 400: {details}")
        return error_response(400, "Invalid request", details)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return error_response(exc.status_code, str(exc.detail))
