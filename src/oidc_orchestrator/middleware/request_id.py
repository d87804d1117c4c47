from __future__ import annotations

import logging
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag every request with an id, echoed back in the response headers."""

    def __init__(self, app, header_name: str = "X-Request-ID", logger_name: str = "oidc_orchestrator"):
        super().__init__(app)
        self.header_name = header_name
        self.logger = logging.getLogger(logger_name)

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = request_id
        self.logger.info(
            "request",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
            },
        )
        response = await call_next(request)
        response.headers[self.header_name] = request_id
        return response
