"""
HTTP middleware components for request/response processing.

This module provides middleware for error handling, request timing and CORS
preflight answers.
"""

import logging
import time
import uuid
from typing import Awaitable, Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware turning unexpected exceptions into a generic 500 response."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(f"Unhandled error in {request.method} {request.url.path}: {e}")

            return JSONResponse(
                status_code=500,
                content={
                    "error": str(e) if request.app.debug else "Internal server error",
                    "kind": "internal",
                    "requestId": getattr(request.state, "request_id", None)
                }
            )


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Middleware tagging each request with an id and logging its duration."""

    def __init__(self, app: object, slow_request_threshold: float = 30.0) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self.slow_request_threshold = slow_request_threshold
        self.metrics = {
            "request_count": 0,
            "total_time": 0.0,
            "slow_requests": 0
        }

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        start_time = time.time()

        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)

        duration = time.time() - start_time
        self.metrics["request_count"] += 1
        self.metrics["total_time"] += duration

        if duration > self.slow_request_threshold:
            self.metrics["slow_requests"] += 1
            logger.warning(
                f"Slow request {request.method} {request.url.path}: {duration:.3f}s")
        else:
            logger.debug(
                f"{request.method} {request.url.path} -> {response.status_code} in {duration:.3f}s")

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        return response


class PreflightCORSMiddleware(CORSMiddleware):
    """
    Allow-list CORS middleware whose preflight answer is always 200 with an
    empty body.

    A preflight that fails the allow-list gets no ``Access-Control-Allow-*``
    headers, so the browser refuses the actual request.
    """

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers=request_headers)
        if response.status_code != 200:
            logger.debug(
                f"Refused CORS preflight from {request_headers.get('origin')}: "
                f"{response.body.decode(errors='replace')}")
            return Response(status_code=200, headers={"Vary": "Origin"})

        headers = {
            key: value for key, value in response.headers.items()
            if key not in ("content-length", "content-type")
        }
        return Response(status_code=200, headers=headers)
