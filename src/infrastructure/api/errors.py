from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from src.domain.exceptions import (
    ParkingError, NotFoundError, ConflictError, InvalidError, ForbiddenError, StorageFailure
)

STATUS_BY_ERROR = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    InvalidError: status.HTTP_400_BAD_REQUEST,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    StorageFailure: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: ParkingError) -> int:
    for error_type, status_code in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def parking_error_handler(request: Request, exc: ParkingError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.debug(f"{request.method} {request.url.path} rejected ({status_code}): {exc}")
    return JSONResponse(status_code=status_code, content={"success": False, "error": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ParkingError, parking_error_handler)
