"""Security headers middleware.

The same baseline a browser-facing API usually gets from helmet:
- X-Content-Type-Options: no MIME sniffing
- X-Frame-Options: no framing (clickjacking)
- Referrer-Policy: limit referrer leakage
- X-DNS-Prefetch-Control / X-Download-Options / X-Permitted-Cross-Domain-Policies
- Cross-Origin-Opener-Policy: isolate the browsing context
- Strict-Transport-Security: only on HTTPS connections

Cross-Origin-Resource-Policy is not set: the SPA is served
from a different origin and loads resources from this API.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Permitted-Cross-Domain-Policies": "none",
    "Cross-Origin-Opener-Policy": "same-origin",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = (
                "max-age=15552000; includeSubDomains"
            )
        return response
