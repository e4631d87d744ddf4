"""FastAPI exception handlers producing the standard ErrorResponse."""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from payrail.errors.exceptions import PayrailError, SignatureError
from payrail.models.common import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI app."""

    @app.exception_handler(PayrailError)
    async def payrail_error_handler(request: Request, exc: PayrailError):
        trace_id = getattr(request.state, "trace_id", "trc_unknown")
        if isinstance(exc, SignatureError):
            logger.warning(
                "webhook_signature_rejected",
                extra={
                    "path": request.url.path,
                    "trace_id": trace_id,
                    "reason": exc.message,
                },
            )
        elif exc.status_code >= 500:
            logger.error("request_failed", extra={"path": request.url.path, "code": exc.code})
        error_response = ErrorResponse(
            error=ErrorDetail(
                code=exc.code,
                message=exc.message,
                details=exc.details,
                trace_id=trace_id,
                timestamp=datetime.now(timezone.utc),
            ),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response.model_dump(mode="json", exclude_none=True),
        )
