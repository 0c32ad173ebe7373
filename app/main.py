"""FastAPI application entrypoint. No business logic; only wiring, middleware and error mapping."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from app.api.v1 import router as v1_router
from app.core.config import Settings, settings
from app.core.errors import AuthenticationError, DomainError
from app.middleware.csrf import CsrfMiddlewareASGI
from app.middleware.rate_limit import RateLimitMiddlewareASGI

logger = logging.getLogger(__name__)

# OAuth state nonce lifetime in the signed session cookie.
SESSION_MAX_AGE_SEC = 10 * 60


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Map domain errors to JSON; server-side failures get an opaque message."""
    if exc.status_code >= 500:
        logger.error(
            "Request failed: %s %s -> %s: %s",
            request.method,
            request.url.path,
            type(exc).__name__,
            exc.message,
        )
    headers = None
    if isinstance(exc, AuthenticationError) and exc.status_code == 401:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "detail": exc.message},
        headers=headers,
    )


def create_app(app_settings: Settings = settings) -> FastAPI:
    application = FastAPI(
        title="Hotel Booking API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Starlette runs the last-added middleware first: CORS, session, rate limit, then CSRF.
    application.add_middleware(CsrfMiddlewareASGI, settings=app_settings)
    application.add_middleware(RateLimitMiddlewareASGI, settings=app_settings)
    application.add_middleware(
        SessionMiddleware,
        secret_key=app_settings.SESSION_SECRET.get_secret_value(),
        session_cookie="oauth_session",
        max_age=SESSION_MAX_AGE_SEC,
        same_site="lax",
        https_only=bool(app_settings.COOKIE_SECURE),
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=[app_settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(DomainError, domain_error_handler)
    application.include_router(v1_router, prefix=app_settings.API_V1_PREFIX)

    @application.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Hotel Booking API"}

    return application


app = create_app()
