"""HTTP request logging middleware."""

import time
import uuid
from typing import Awaitable, Callable

from fastapi import Request, Response

from washtrack.utils.logger import bind_request_id, clear_request_id, get_logger

log = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


async def logging_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Assign a request id and log each request with its duration."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    bind_request_id(request_id)
    start = time.perf_counter()

    log.info("request started", method=request.method, path=request.url.path)
    try:
        response = await call_next(request)
    except Exception:
        log.error(
            "request failed",
            method=request.method,
            path=request.url.path,
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        clear_request_id()
        raise

    response.headers[REQUEST_ID_HEADER] = request_id
    log.info(
        "request finished",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=int((time.perf_counter() - start) * 1000),
    )
    clear_request_id()
    return response
