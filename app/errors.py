"""Exception handlers mapping domain errors to HTTP responses."""
from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from domain.errors import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    DomainError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)
from infrastructure.logging import get_logger


logger = get_logger()

STATUS_BY_ERROR = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    DuplicateError: status.HTTP_409_CONFLICT,
}


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Map client-correctable domain errors to their 4xx status."""
    status_code = next(
        (code for error_type, code in STATUS_BY_ERROR.items() if isinstance(exc, error_type)),
        None,
    )
    if status_code is None:
        return await generic_error_handler(request, exc)

    logger.warning(
        f"{type(exc).__name__}: {exc}",
        path=request.url.path,
        status_code=status_code,
    )
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error_type": type(exc).__name__},
        headers=headers,
    )


async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    """Missing server configuration is an operator problem, reported as 500."""
    logger.error(f"Server misconfiguration: {exc}", path=request.url.path)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Server misconfiguration", "error_type": "ConfigurationError"},
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle generic exceptions with 500 status without exposing internals."""
    logger.error(
        f"Internal server error: {type(exc).__name__}",
        path=request.url.path,
        exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "error_type": "InternalServerError"
        }
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle FastAPI request validation errors with detailed messages."""
    errors = jsonable_encoder(exc.errors())
    logger.warning(
        "Request validation failed",
        path=request.url.path,
        errors=errors
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": errors, "error_type": "RequestValidationError"}
    )
