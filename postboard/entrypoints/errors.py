import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse

from postboard.domain import exceptions

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    exceptions.NotFoundError: status.HTTP_404_NOT_FOUND,
    exceptions.Unauthorized: status.HTTP_401_UNAUTHORIZED,
    exceptions.DuplicateAction: status.HTTP_400_BAD_REQUEST,
    exceptions.InvalidState: status.HTTP_400_BAD_REQUEST,
    exceptions.UserExists: status.HTTP_400_BAD_REQUEST,
    exceptions.ConcurrencyConflict: status.HTTP_409_CONFLICT,
    exceptions.StoreTimeout: status.HTTP_503_SERVICE_UNAVAILABLE,
}

HEADERS_BY_ERROR = {
    exceptions.StoreTimeout: {"Retry-After": "1"},
}


def _field_errors(errors) -> list[dict]:
    return [{"field": field, "msg": msg} for field, msg in errors]


async def validation_error_handler(request: Request, exc: exceptions.ValidationError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"errors": _field_errors(exc.errors)})


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        msg = str(err.get("msg", "Invalid value")).removeprefix("Value error, ")
        errors.append((".".join(loc) or "body", msg))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"errors": _field_errors(errors)})


async def domain_error_handler(request: Request, exc: exceptions.DomainError):
    for error_type, status_code in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            logger.info("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
            return JSONResponse(
                status_code=status_code,
                content={"detail": str(exc)},
                headers=HEADERS_BY_ERROR.get(error_type),
            )
    # StoreUnavailable and anything unmapped: never leak internals
    logger.error("Unhandled %s on %s %s", type(exc).__name__, request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Server Error"})


async def http_exception_handle_logging(request: Request, exc: HTTPException):
    logger.error(f"HTTPException: {exc.status_code} {exc.detail}")
    return await http_exception_handler(request, exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(exceptions.ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(exceptions.DomainError, domain_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handle_logging)
