# medistore/api/errors.py
import redis
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from medistore.domain.errors import ErrorKind, ServiceError
from medistore.utils.logging import get_logger

logger = get_logger(__name__)


def _context(request: Request) -> dict:
    return {
        "method": request.method,
        "path": request.url.path,
        "user_id": getattr(request.state, "user_id", None),
    }


def _respond(kind: ErrorKind, message: str) -> JSONResponse:
    return JSONResponse(status_code=kind.http_status, content={"message": message, "code": kind.code})


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error(f"{exc.code}: {exc.message}", extra=_context(request))
    else:
        logger.warning(f"{exc.code}: {exc.message}", extra=_context(request))
    return _respond(exc.kind, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path", "header"))
    message = f"{field}: {first.get('msg')}" if field else str(first.get("msg", "Invalid request"))

    logger.warning(f"Validation failed: {message}", extra=_context(request))
    return _respond(ErrorKind.VALIDATION, message)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Integrity error", extra=_context(request), exc_info=exc)
    return _respond(ErrorKind.CONFLICT, "Duplicate entry")


async def operational_error_handler(request: Request, exc: OperationalError) -> JSONResponse:
    #timeouts, lock waits, lost connections; the transaction is already rolled back
    logger.error("Database temporarily unavailable", extra=_context(request), exc_info=exc)
    return _respond(ErrorKind.RETRYABLE, "Temporarily unavailable, retry")


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error", extra=_context(request), exc_info=exc)
    return _respond(ErrorKind.INTERNAL, "Something went wrong")


async def redis_error_handler(request: Request, exc: redis.RedisError) -> JSONResponse:
    logger.error("Redis unavailable", extra=_context(request), exc_info=exc)
    return _respond(ErrorKind.RETRYABLE, "Temporarily unavailable, retry")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(OperationalError, operational_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(redis.RedisError, redis_error_handler)
