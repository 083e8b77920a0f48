"""Per-request log context and access logging."""

import time
import uuid

import structlog
from fastapi import Request, Response

from staticdrop.core.logger import LogIcon, logger
from staticdrop.middlewares.base import BaseMiddleware

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128


class RequestContextMiddleware(BaseMiddleware):
    """Binds request id, method and path into structlog contextvars."""

    def before(self, request: Request) -> Request:
        incoming = request.headers.get(REQUEST_ID_HEADER, "")
        request_id = incoming if 0 < len(incoming) <= MAX_REQUEST_ID_LENGTH else uuid.uuid4().hex

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.scope["path"],
        )
        request.state.request_id = request_id
        request.state.started_at = time.perf_counter()
        return request

    def after(self, request: Request, response: Response) -> Response:
        elapsed_ms = (time.perf_counter() - request.state.started_at) * 1000
        response.headers[REQUEST_ID_HEADER] = request.state.request_id
        logger.info(
            "Request served",
            icon=LogIcon.NETWORK,
            status=response.status_code,
            duration_ms=round(elapsed_ms, 2),
        )
        structlog.contextvars.clear_contextvars()
        return response
