"""Exception taxonomy shared by the services and the HTTP layer."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class PortalError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(PortalError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class NotFound(PortalError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class TokenError(PortalError):
    """결재 링크 토큰 관련 실패. tokenExpired 플래그로 만료를 구분한다."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid token"
    token_expired = False


class TokenInvalid(TokenError):
    default_message = "Invalid token"


class TokenExpired(TokenError):
    default_message = "Token has expired"
    token_expired = True


class TokenMismatch(TokenError):
    default_message = "Token does not match request"


class Conflict(PortalError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class ConcurrentModification(Conflict):
    default_message = "Employee record was modified concurrently, please retry"


class ServerError(PortalError):
    default_message = "Internal server error"


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # 누락/형식 오류는 모두 InvalidInput(400)으로 취급
    return JSONResponse(
        status_code=InvalidInput.status_code,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


async def database_error_handler(request: Request, exc: PyMongoError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=ServerError.status_code,
        content={"error": "Database error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(PyMongoError, database_error_handler)
