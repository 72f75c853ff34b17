"""Translate counter engine exceptions into JSON error responses."""

from __future__ import annotations

import logging
from collections.abc import Callable, Coroutine
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from encore_counters.core.errors import CounterError, CounterResetError

logger = logging.getLogger(__name__)

ExceptionHandler = Callable[[Request, Exception], Coroutine[Any, Any, Response]]


async def counter_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = exc if isinstance(exc, CounterError) else CounterError(str(exc))
    if error.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, error.message)
    return JSONResponse(
        status_code=error.status_code,
        content={"success": False, "error": error.message},
    )


async def counter_reset_error_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, CounterResetError):
        return await counter_error_handler(request, exc)
    logger.error("%s %s partially failed: %s", request.method, request.url.path, exc.failed)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.message,
            "reset": exc.reset,
            "failed": exc.failed,
        },
    )


EXCEPTION_HANDLERS: dict[type[Exception], ExceptionHandler] = {
    CounterResetError: counter_reset_error_handler,
    CounterError: counter_error_handler,
}


def register_exception_handlers(app: FastAPI) -> None:
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
