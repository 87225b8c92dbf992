"""
Domain error rendering.

Maps each ``ErrorKind`` to an HTTP status and renders the error body.
"""

from typing import Dict

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..domain.exceptions import DirectoryError, ErrorKind

logger = structlog.get_logger()

STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


async def directory_error_handler(request: Request, exc: DirectoryError) -> JSONResponse:
    status_code = STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if exc.kind is ErrorKind.UNAVAILABLE:
        logger.error(
            "Backend unavailable",
            path=request.url.path,
            error_code=exc.error_code,
            error=exc.message,
        )
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": exc.message,
            "error_code": exc.error_code,
            "details": exc.details,
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DirectoryError, directory_error_handler)
