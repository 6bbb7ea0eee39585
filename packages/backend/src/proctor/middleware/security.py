"""Security headers middleware.

Every response, errors included, leaves with a fixed header set. Key
listings and user records are private to the caller, so proxies must
not cache them. HSTS is added only when the request itself arrived over
HTTPS, and its lifetime comes from settings (0 turns it off).
"""

from collections.abc import Mapping

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

DEFAULT_HEADERS: Mapping[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

# A route may choose its own caching; everything else is no-store.
DEFAULT_CACHE_CONTROL = "no-store"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Stamp DEFAULT_HEADERS, Cache-Control and (on HTTPS) HSTS."""

    def __init__(self, app: ASGIApp, hsts_max_age: int = 0):
        super().__init__(app)
        self.hsts = (
            f"max-age={hsts_max_age}; includeSubDomains" if hsts_max_age > 0 else None
        )

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers.update(DEFAULT_HEADERS)
        response.headers.setdefault("Cache-Control", DEFAULT_CACHE_CONTROL)
        if self.hsts and request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = self.hsts
        return response
