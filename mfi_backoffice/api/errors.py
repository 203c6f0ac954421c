"""Translate domain and framework errors into structured JSON responses"""

import logging
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from mfi_backoffice.domain.exceptions import (
    DomainException,
    ForbiddenError,
    NotFoundError,
    StorageError,
    UnauthorizedError,
    ValidationError,
)

STATUS_CODES = {
    ValidationError: 400,
    UnauthorizedError: 401,
    ForbiddenError: 403,
    NotFoundError: 404,
    StorageError: 500,
}


def error_body(message: str, details=None) -> dict:
    body = {"error": message}
    if details is not None:
        body["details"] = jsonable_encoder(details)
    return body


async def handle_domain_exception(request: Request, exc: DomainException) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "unknown")
    status_code = STATUS_CODES.get(type(exc), 500)

    if status_code >= 500:
        # Internal detail stays in the logs
        logging.error(f"Storage failure: {exc.message}", extra={"request_id": request_id, "path": request.url.path})
        return JSONResponse(status_code=status_code, content=error_body("Internal server error", exc.message))

    logging.warning(exc.message, extra={"request_id": request_id, "path": request.url.path})
    return JSONResponse(status_code=status_code, content=error_body(exc.message, exc.details))


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=error_body(str(exc.detail)), headers=exc.headers)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [{"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")} for e in exc.errors()]
    message = "Missing required fields" if all(e["type"] == "missing" for e in errors) else "Validation failed"
    return JSONResponse(status_code=400, content=error_body(message, errors))


async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "unknown")
    logging.error(f"Database error: {exc}", extra={"request_id": request_id, "path": request.url.path})
    return JSONResponse(status_code=500, content=error_body("Internal server error", "Database operation failed"))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, handle_domain_exception)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(SQLAlchemyError, handle_database_error)
