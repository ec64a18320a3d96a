# docintel/core/error_handlers.py
from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from docintel.core.exceptions import DuplicateFileError, FolderNotFoundError, GatewayError

logger = logging.getLogger(__name__)


def _error_payload(message: str, details: Any = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"error": message}
    if details is not None:
        payload["details"] = details
    return payload


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(GatewayError)
    async def gateway_exception_handler(_: Request, exc: GatewayError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(FolderNotFoundError)
    async def folder_not_found_handler(_: Request, exc: FolderNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content=_error_payload(str(exc)))

    @app.exception_handler(DuplicateFileError)
    async def duplicate_file_handler(_: Request, exc: DuplicateFileError) -> JSONResponse:
        return JSONResponse(status_code=409, content=_error_payload(str(exc)))

    @app.exception_handler(HTTPException)
    async def http_exception_handler(_: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_payload(str(exc.detail)),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content=_error_payload("Request validation failed", details=jsonable_errors(exc)),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error: %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=_error_payload("Internal server error while processing your request", details=str(exc)),
        )


def jsonable_errors(exc: RequestValidationError) -> Any:
    # ctx may hold exception instances that JSONResponse cannot encode
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {k: str(v) for k, v in error["ctx"].items()}
        errors.append(error)
    return errors
