"""Middleware: Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    CompressionMiddleware -- gzip/deflate for textual responses
    CORSMiddleware -- Cross-Origin Resource Sharing
    RateLimitMiddleware -- fixed-window per-client request budget
    RecoverMiddleware -- turn exceptions into error responses
    RequestLoggerMiddleware -- one access log line per request
    SecurityHeadersMiddleware -- fixed security headers on every response
    StaticFiles -- serve static files from a directory
"""

from gardensite.middleware.builtin import CORSConfig, CORSMiddleware
from gardensite.middleware.compress import CompressionConfig, CompressionMiddleware
from gardensite.middleware.logger import RequestLoggerMiddleware
from gardensite.middleware.protocol import Middleware, Next
from gardensite.middleware.rate_limit import RateLimitConfig, RateLimitMiddleware
from gardensite.middleware.recover import RecoverMiddleware
from gardensite.middleware.security_headers import (
    SecurityHeadersConfig,
    SecurityHeadersMiddleware,
)
from gardensite.middleware.static import StaticFiles

__all__ = [
    "CORSConfig",
    "CORSMiddleware",
    "CompressionConfig",
    "CompressionMiddleware",
    "Middleware",
    "Next",
    "RateLimitConfig",
    "RateLimitMiddleware",
    "RecoverMiddleware",
    "RequestLoggerMiddleware",
    "SecurityHeadersConfig",
    "SecurityHeadersMiddleware",
    "StaticFiles",
]
