import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.services.errors import DomainError, Internal, ValidationError, errors_from_pydantic


logger = logging.getLogger(__name__)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if isinstance(exc, Internal):
        logger.error("Internal failure on %s %s", request.method, request.url.path, exc_info=exc.original_exception or exc)
        # Never leak datastore detail to the caller
        return JSONResponse(status_code=exc.status_code, content=Internal().to_output())
    return JSONResponse(status_code=exc.status_code, content=exc.to_output())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationError(errors=errors_from_pydantic(exc))
    return JSONResponse(status_code=error.status_code, content=error.to_output())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=Internal().to_output())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
