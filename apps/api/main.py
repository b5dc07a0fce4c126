"""FastAPI application setup with request logging and readiness probes."""

from __future__ import annotations

import shutil
from time import monotonic

from fastapi import FastAPI, HTTPException, Request
from fastapi.exception_handlers import http_exception_handler
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from services.pipeline.errors import MethodNotAllowed, PipelineError
from shared.logging import log_info

from .media import error_response
from .media import router as media_router


app = FastAPI(title="Subcast API")


class LogRequestsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = monotonic()
        response = await call_next(request)
        duration_ms = int((monotonic() - start) * 1000)
        log_info(
            "request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=duration_ms,
        )
        return response


app.add_middleware(LogRequestsMiddleware)
app.include_router(media_router)


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError):
    return error_response(request.url.path, exc)


@app.exception_handler(StarletteHTTPException)
async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        response = error_response(request.url.path, MethodNotAllowed("Method Not Allowed"))
        for name, value in (exc.headers or {}).items():
            response.headers[name] = value
        return response
    return await http_exception_handler(request, exc)


@app.get("/healthz")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.get("/readyz")
async def readyz() -> dict[str, str]:
    """Readiness probe; ffmpeg must be on ``PATH``."""
    if shutil.which("ffmpeg") is None:
        raise HTTPException(status_code=503, detail="ffmpeg not found")
    return {"status": "ok"}
