from fastapi import Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from app.services.errors import DomainError, ErrorCode
from app.stores.interfaces import StoreError, StoreUnavailableError


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    logger.warning(f"Domain error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code.value},
    )


async def store_unavailable_handler(
    request: Request, exc: StoreUnavailableError
) -> JSONResponse:
    logger.error(f"Store unavailable on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "detail": "Storage temporarily unavailable",
            "code": ErrorCode.STORE_UNAVAILABLE.value,
        },
    )


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.opt(exception=exc).error(f"Store error on {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Server error"},
    )


EXCEPTION_HANDLERS = {
    DomainError: domain_error_handler,
    StoreUnavailableError: store_unavailable_handler,
    StoreError: store_error_handler,
}


def register_exception_handlers(app):
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
