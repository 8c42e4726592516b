from typing import Optional, Tuple
import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from core.context import trace_id_var

logger = logging.getLogger(__name__)

TRACE_HEADER = "X-Trace-ID"


def redirect_outcome(response: Response) -> Optional[Tuple[str, str, int]]:
    """
    (location, kind, status) when the response tells the client to navigate.

    kind is "http" for a 3xx with a Location header, or the navigation type
    ("push" / "replace") for a JSON navigation instruction.
    """
    location = response.headers.get("location")
    if location is not None and 300 <= response.status_code < 400:
        return location, "http", response.status_code
    instructed = response.headers.get("X-Redirect-Location")
    if instructed is not None:
        return instructed, response.headers.get("X-Redirect-Type", "replace"), response.status_code
    return None


class TraceMiddleware(BaseHTTPMiddleware):
    """
    Trace Middleware
    Binds a trace id to the request (incoming X-Trace-ID or a fresh uuid),
    echoes it on the response and records where the request was redirected.
    """
    async def dispatch(self, request: Request, call_next):
        trace_id = request.headers.get(TRACE_HEADER) or str(uuid.uuid4())
        token = trace_id_var.set(trace_id)
        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception as e:
            logger.error(f"❌ [Trace] {request.method} {request.url.path} 失败: {e} (TraceID={trace_id})", exc_info=True)
            raise
        finally:
            trace_id_var.reset(token)

        response.headers[TRACE_HEADER] = trace_id
        elapsed_ms = (time.perf_counter() - started) * 1000

        outcome = redirect_outcome(response)
        if outcome:
            location, kind, status = outcome
            logger.info(
                f"↪️ [Trace] {request.method} {request.url.path} 重定向至 {location} "
                f"(kind={kind}, status={status}, TraceID={trace_id}, {elapsed_ms:.2f}ms)"
            )
        else:
            logger.debug(
                f"[Trace] {request.method} {request.url.path} -> {response.status_code} "
                f"(TraceID={trace_id}, {elapsed_ms:.2f}ms)"
            )
        return response
