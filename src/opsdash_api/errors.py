"""Error types for the directory sync and FastAPI error handlers."""

from typing import Optional

import pydantic
from fastapi import Request
from fastapi import status
from fastapi.responses import JSONResponse
from loguru import logger

from opsdash_api.monitoring.logger import log_response_info

__all__ = [
    "DirectorySyncError",
    "DirectoryConfigError",
    "DirectoryAPIError",
    "SyncAlreadyRunningError",
    "format_record_error",
    "handle_broad_exceptions",
    "handle_pydantic_validation_errors",
    "handle_directory_sync_errors",
]


class DirectorySyncError(Exception):
    """Base class for errors raised by the directory reconciliation engine."""


class DirectoryConfigError(DirectorySyncError):
    """Directory credentials or collection ids are missing or invalid. Aborts the run."""


class DirectoryAPIError(DirectorySyncError):
    """The directory API returned a non-success response."""

    def __init__(self, status_code: int, message: str, path: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        self.path = path
        super().__init__(f"Directory API error {status_code}: {message}")


class SyncAlreadyRunningError(DirectorySyncError):
    """Another sync run currently holds the run lock."""


def format_record_error(display_name: str, error: Exception) -> str:
    """Format a per-record failure for the run's error list."""
    return f'Error syncing "{display_name}": {error}'


# fastapi docs on middlewares: https://fastapi.tiangolo.com/tutorial/middleware/
async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that goes unhandled by a more specific exception handler."""
    try:
        return await call_next(request)
    except Exception as err:  # pylint: disable=broad-except
        error_response = {"detail": "Internal server error", "error_type": type(err).__name__}

        logger.error(
            "Unhandled exception",
            http_status=500,
            http_method=request.method,
            url_path=str(request.url.path),
            error_type=type(err).__name__,
            error=str(err),
            exc_info=True,
        )

        response = JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_response,
        )
        log_response_info(response)
        return response


# fastapi docs on error handlers: https://fastapi.tiangolo.com/tutorial/handling-errors/
async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    """Handle Pydantic validation errors."""
    errors = exc.errors()
    error_response = {
        "detail": [
            {
                "msg": error["msg"],
                "input": error["input"],
            }
            for error in errors
        ]
    }

    logger.warning(
        f"Validation error: {len(errors)} validation errors",
        http_status=422,
        http_method=request.method,
        url_path=str(request.url.path),
        error_type="ValidationError",
    )

    response = JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response,
    )
    log_response_info(response)

    return response


async def handle_directory_sync_errors(request: Request, exc: DirectorySyncError) -> JSONResponse:
    """
    Convert fatal sync errors into HTTP responses.

    - DirectoryConfigError -> 503 Service Unavailable (integration not configured)
    - DirectoryAPIError -> 502 Bad Gateway (upstream directory failed)
    - SyncAlreadyRunningError -> 409 Conflict
    - Other DirectorySyncError -> 500
    """
    error_type = type(exc).__name__

    if isinstance(exc, DirectoryConfigError):
        http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    elif isinstance(exc, DirectoryAPIError):
        http_status = status.HTTP_502_BAD_GATEWAY
    elif isinstance(exc, SyncAlreadyRunningError):
        http_status = status.HTTP_409_CONFLICT
    else:
        http_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    error_response = {"detail": str(exc), "error_type": error_type}

    logger.error(
        "Directory sync error",
        http_status=http_status,
        error_type=error_type,
        error=str(exc),
        http_method=request.method,
        url_path=str(request.url.path),
    )

    response = JSONResponse(status_code=http_status, content=error_response)
    log_response_info(response)
    return response
