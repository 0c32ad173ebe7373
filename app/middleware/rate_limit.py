"""
ASGI middleware limiting requests per client IP.

Rules:
- General bucket: RATE_LIMIT_GENERAL requests per RATE_LIMIT_GENERAL_WINDOW_SEC
- Auth bucket (login and Google OAuth): RATE_LIMIT_AUTH per RATE_LIMIT_AUTH_WINDOW_SEC,
  counted in addition to the general bucket
- Health checks and CORS preflight are never limited
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from starlette.datastructures import MutableHeaders
from starlette.responses import JSONResponse

from app.services.rate_limit import RateLimiter

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Message, Receive, Scope, Send

    from app.core.config import Settings

logger = logging.getLogger(__name__)

BUCKET_GENERAL = "general"
BUCKET_AUTH = "auth"


class RateLimitMiddlewareASGI:
    def __init__(
        self,
        app: "ASGIApp",
        settings: "Settings",
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self.app = app
        self.settings = settings
        self.rate_limiter = rate_limiter or RateLimiter()
        prefix = settings.API_V1_PREFIX.rstrip("/")
        self._health_prefix = f"{prefix}/health"
        self._auth_paths = (f"{prefix}/auth/login", f"{prefix}/auth/google")

    @staticmethod
    def _extract_client_ip(scope: "Scope") -> str:
        for key, value in scope.get("headers") or []:
            if key.decode().lower() == "x-forwarded-for":
                candidate = value.decode().split(",")[0].strip()
                if candidate:
                    return candidate
        client_info = scope.get("client")
        if client_info and client_info[0]:
            return str(client_info[0])
        return "unknown"

    def _is_auth_path(self, path: str) -> bool:
        return any(path == p or path.startswith(p + "/") for p in self._auth_paths)

    async def _reject(
        self, scope: "Scope", receive: "Receive", send: "Send", bucket: str, limit: int, retry_after: int
    ) -> None:
        logger.warning(
            "Rate limit exceeded: bucket=%s path=%s retry_after=%s",
            bucket,
            scope.get("path"),
            retry_after,
        )
        response = JSONResponse(
            status_code=429,
            content={
                "success": False,
                "detail": f"Too many requests. Try again in {retry_after} seconds.",
            },
            headers={
                "Retry-After": str(retry_after),
                "X-RateLimit-Limit": str(limit),
                "X-RateLimit-Remaining": "0",
            },
        )
        await response(scope, receive, send)

    async def __call__(self, scope: "Scope", receive: "Receive", send: "Send") -> None:
        if scope["type"] != "http" or not self.settings.RATE_LIMIT_ENABLED:
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        if scope.get("method") == "OPTIONS" or path.startswith(self._health_prefix):
            await self.app(scope, receive, send)
            return

        client_ip = self._extract_client_ip(scope)

        if self._is_auth_path(path):
            allowed, _, retry_after = self.rate_limiter.check_rate_limit(
                client_ip,
                self.settings.RATE_LIMIT_AUTH,
                self.settings.RATE_LIMIT_AUTH_WINDOW_SEC,
                bucket=BUCKET_AUTH,
            )
            if not allowed:
                await self._reject(scope, receive, send, BUCKET_AUTH, self.settings.RATE_LIMIT_AUTH, retry_after)
                return

        limit = self.settings.RATE_LIMIT_GENERAL
        allowed, remaining, retry_after = self.rate_limiter.check_rate_limit(
            client_ip,
            limit,
            self.settings.RATE_LIMIT_GENERAL_WINDOW_SEC,
            bucket=BUCKET_GENERAL,
        )
        if not allowed:
            await self._reject(scope, receive, send, BUCKET_GENERAL, limit, retry_after)
            return

        async def send_wrapper(message: "Message") -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers["X-RateLimit-Limit"] = str(limit)
                headers["X-RateLimit-Remaining"] = str(remaining)
            await send(message)

        await self.app(scope, receive, send_wrapper)
