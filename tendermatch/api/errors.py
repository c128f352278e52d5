from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tendermatch.logging.logger import Log
from tendermatch.processor.exceptions import (
    AdapterError,
    FileTooLargeError,
    InvalidArgumentError,
    NotFoundError,
    TenderMatchError,
    UnsupportedFileTypeError,
    ValidationError,
)

INTERNAL_ERROR_MESSAGE = "Internal server error"


def status_code_for(exc: TenderMatchError) -> int:
    if isinstance(exc, FileTooLargeError):
        return 413
    if isinstance(exc, UnsupportedFileTypeError):
        return 415
    if isinstance(exc, InvalidArgumentError):
        return 400
    if isinstance(exc, ValidationError):
        return 422
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, AdapterError):
        return 502
    return 500


def register_error_handlers(app: FastAPI) -> None:
    """Map domain errors to HTTP responses. Internal details are only logged."""

    @app.exception_handler(TenderMatchError)
    async def handle_domain_error(request: Request, exc: TenderMatchError) -> JSONResponse:
        status_code = status_code_for(exc)
        if status_code >= 500:
            Log.error(f"{request.method} {request.url.path} failed: {exc}")
            return JSONResponse(status_code=status_code, content={"detail": INTERNAL_ERROR_MESSAGE})
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        Log.exception(f"{request.method} {request.url.path} failed unexpectedly: {exc}")
        return JSONResponse(status_code=500, content={"detail": INTERNAL_ERROR_MESSAGE})
