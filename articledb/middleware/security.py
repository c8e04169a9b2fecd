"""Security middleware for the articledb API."""

import logging

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


class SecurityMiddleware(BaseHTTPMiddleware):
    """
    Security middleware providing:
    - Request size limiting
    - Security headers on every response
    """

    def __init__(self, app, max_request_size: int = 1024 * 1024):
        super().__init__(app)
        self.max_request_size = max_request_size

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_request_size:
            logger.warning(f"⚠️ Request too large: {content_length} bytes (max: {self.max_request_size})")
            return JSONResponse(
                status_code=413,
                content={"error": "Request entity too large", "detail": f"max {self.max_request_size} bytes"}
            )

        response = await call_next(request)
        self._add_security_headers(response)
        return response

    def _add_security_headers(self, response: Response):
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
