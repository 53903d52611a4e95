# backend/utils/error_handlers.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from utils.exceptions import ConflictError, ErrorCode, InternalError, WorkflowError

logger = logging.getLogger(__name__)


def setup_error_handlers(app: FastAPI):
    """Register the handlers that map workflow and storage errors to JSON bodies."""

    @app.exception_handler(WorkflowError)
    async def workflow_error_handler(request: Request, exc: WorkflowError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log("%s %s -> %s: %s", request.method, request.url.path, exc.code.value, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = []
        for error in exc.errors():
            errors.append({
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            })

        logger.warning("Validation error on %s %s: %s", request.method, request.url.path, errors)

        return JSONResponse(
            status_code=400,
            content={
                "error": {
                    "code": ErrorCode.VALIDATION_ERROR.value,
                    "message": "Invalid data",
                    "context": {"details": errors},
                }
            },
        )

    @app.exception_handler(StaleDataError)
    async def stale_data_handler(request: Request, exc: StaleDataError):
        logger.warning("Concurrent modification on %s %s: %s", request.method, request.url.path, exc)
        err = ConflictError("The record was modified by another request, reload and retry")
        return JSONResponse(status_code=err.status_code, content=err.to_response())

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Storage failure on %s %s", request.method, request.url.path)
        err = InternalError("Storage failure")
        return JSONResponse(status_code=err.status_code, content=err.to_response())
