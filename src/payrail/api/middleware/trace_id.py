"""Trace ID middleware: request/response propagation and log context."""

import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from payrail.logging_config import bind_request_context, clear_request_context

TRACE_HEADER = "x-trace-id"


class TraceIdMiddleware(BaseHTTPMiddleware):
    """Take X-Trace-Id from the caller or generate one, bind it for logging, echo it back."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        trace_id = request.headers.get(TRACE_HEADER) or f"trc_{uuid.uuid4().hex[:16]}"
        request.state.trace_id = trace_id
        bind_request_context(trace_id, request.method, request.url.path)

        try:
            response = await call_next(request)
        finally:
            clear_request_context()
        response.headers[TRACE_HEADER] = trace_id
        return response
