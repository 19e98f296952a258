"""
Response envelopes and global exception handlers.

Every response body uses the same wrapper:
- success: {"status": "success", "results"?: int, "data": {...}}
- failure: {"status": "error", "message": "Internal Server Error"} with HTTP 500

Failures are not told apart: store errors, bad request bodies and anything
else unexpected all produce the same failure envelope.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from . import config
from .db import StoreOperationFailed
from .params import MalformedBody

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "Internal Server Error"


def success(data: dict[str, Any], *, results: int | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"status": "success"}
    if results is not None:
        body["results"] = results
    # Decimal columns (average_rating, rating) become JSON numbers.
    body["data"] = jsonable_encoder(data)
    return body


def error_body() -> dict[str, str]:
    return {"status": "error", "message": ERROR_MESSAGE}


def error_response() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(),
    )


def _cors_headers(request: Request) -> dict[str, str]:
    origin = request.headers.get("origin")
    if not origin:
        return {}
    origins = config.cors_origins()
    if "*" in origins:
        return {"Access-Control-Allow-Origin": "*"}
    if origin in origins:
        return {"Access-Control-Allow-Origin": origin, "Vary": "Origin"}
    return {}


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StoreOperationFailed)
    async def store_error_handler(request: Request, exc: StoreOperationFailed) -> JSONResponse:
        logger.error(
            "store_operation_failed method=%s path=%s error=%s",
            request.method,
            request.url.path,
            exc,
            exc_info=exc,
            extra={"method": request.method, "path": request.url.path, "status_code": 500},
        )
        return error_response()

    @app.exception_handler(MalformedBody)
    async def malformed_body_handler(request: Request, exc: MalformedBody) -> JSONResponse:
        logger.warning(
            "malformed_body method=%s path=%s error=%s",
            request.method,
            request.url.path,
            exc,
            extra={"method": request.method, "path": request.url.path, "status_code": 500},
        )
        return error_response()

    # Runs in ServerErrorMiddleware, outside CORSMiddleware, and Starlette
    # re-raises after the response is sent.
    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "unhandled_error method=%s path=%s",
            request.method,
            request.url.path,
            exc_info=exc,
            extra={"method": request.method, "path": request.url.path, "status_code": 500},
        )
        response = error_response()
        response.headers.update(_cors_headers(request))
        return response
