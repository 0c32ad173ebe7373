"""
ASGI middleware enforcing the double-submit CSRF token on state-changing requests.

Rules:
- Enforced for every method except GET, HEAD and OPTIONS
- The header named CSRF_HEADER_NAME must carry the signed token matching the CSRF cookie
- Applied uniformly; Bearer-authenticated calls are not exempt
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from starlette.requests import Request
from starlette.responses import JSONResponse

from app.core.errors import CsrfTokenMismatch
from app.services.csrf import requires_csrf, validate_csrf

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Receive, Scope, Send

    from app.core.config import Settings

logger = logging.getLogger(__name__)


class CsrfMiddlewareASGI:
    def __init__(self, app: "ASGIApp", settings: "Settings") -> None:
        self.app = app
        self.settings = settings

    async def __call__(self, scope: "Scope", receive: "Receive", send: "Send") -> None:
        if scope["type"] != "http" or not requires_csrf(scope.get("method", "GET")):
            await self.app(scope, receive, send)
            return

        # Request(scope) only reads headers; the body stays unread for the app.
        request = Request(scope)
        try:
            validate_csrf(
                request.cookies.get(self.settings.CSRF_COOKIE_NAME),
                request.headers.get(self.settings.CSRF_HEADER_NAME),
                self.settings,
            )
        except CsrfTokenMismatch as e:
            logger.warning(
                "CSRF token rejected: method=%s path=%s",
                scope.get("method"),
                scope.get("path"),
            )
            response = JSONResponse(status_code=e.status_code, content={"success": False, "detail": e.message})
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)
