"""Global exception handlers: domain errors -> HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from ..core.exceptions import (
    ConflictError,
    ForbiddenError,
    NoteGateError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from ..core.logging import get_logger
from ..core.schemas.common import ErrorResponse

logger = get_logger("errors")

STATUS_CODES = {
    NotFoundError: 404,
    ForbiddenError: 403,
    ValidationError: 422,
    ConflictError: 409,
    StorageError: 500,
}


def status_code_for(exc: NoteGateError) -> int:
    for exc_type in type(exc).__mro__:
        if exc_type in STATUS_CODES:
            return STATUS_CODES[exc_type]
    return 400


def error_response(status_code: int, error: str, message: str, details=None) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(NoteGateError)
    async def domain_error_handler(request: Request, exc: NoteGateError):
        status_code = status_code_for(exc)
        if isinstance(exc, StorageError):
            # the cause is already logged where it happened
            return error_response(status_code, "StorageError", StorageError.default_message)
        return error_response(status_code, type(exc).__name__, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return error_response(
            422,
            "ValidationError",
            "Invalid input",
            {"errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return error_response(500, "InternalError", "An internal error occurred")
