"""Map access-control errors to HTTP responses.

Error response format:
    {
        "detail": "Human-readable error message",
        "code": "error_kind",
        "reason": "deny_reason"      # only for forbidden
    }
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from streamgate.core.errors import AccessError, ErrorKind, ForbiddenError

logger = logging.getLogger(__name__)

ERROR_KIND_TO_STATUS: dict[ErrorKind, int] = {
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.EXPIRED_TOKEN: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INVALID_TOKEN: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


def error_response(exc: AccessError) -> JSONResponse:
    status_code = ERROR_KIND_TO_STATUS.get(exc.kind, status.HTTP_400_BAD_REQUEST)
    content: dict[str, str] = {"detail": exc.message, "code": exc.kind.value}
    if isinstance(exc, ForbiddenError):
        content["reason"] = exc.reason.value
    headers = (
        {"WWW-Authenticate": "Bearer"}
        if status_code == status.HTTP_401_UNAUTHORIZED
        else None
    )
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the AccessError handler on the application."""

    @app.exception_handler(AccessError)
    async def access_error_handler(request: Request, exc: AccessError) -> JSONResponse:
        logger.warning(
            "Access error on %s %s: %s (code=%s)",
            request.method,
            request.url.path,
            exc.message,
            exc.kind.value,
        )
        return error_response(exc)
