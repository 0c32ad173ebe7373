"""Account, login, password reset, CSRF token and Google OAuth routes, plus auth dependencies."""

import json
import logging
from datetime import datetime
from typing import Annotated
from urllib.parse import quote, urlencode

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import RedirectResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.errors import (
    DomainError,
    Forbidden,
    InvalidCredentials,
    OAuthCsrfMismatch,
    ValidationError,
)
from app.core.security import create_access_token
from app.models.user import ROLE_ADMIN, ROLE_USER, User
from app.schemas.auth import (
    CsrfTokenResponse,
    CurrentUser,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ProfileUpdateRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    UserOut,
    UserResponse,
    UsersListResponse,
)
from app.services import credentials, identity, oauth
from app.services.csrf import issue_csrf_token
from app.services.mail import send_reset_email

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)

FORGOT_PASSWORD_MESSAGE = "If that email is registered, a reset link has been sent."
LOGOUT_COOKIE_SECONDS = 10


def get_current_user(
    request: Request,
    credentials_: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> CurrentUser:
    """Dependency: resolve the Bearer header (preferred) or token cookie. Raises 401 if missing or invalid."""
    return identity.resolve(
        db,
        settings,
        bearer_token=credentials_.credentials if credentials_ else None,
        cookie_token=request.cookies.get(settings.AUTH_COOKIE_NAME),
    )


def require_roles(*roles: str):
    """Dependency factory: require an authenticated user whose role is in roles. Raises 403 otherwise."""

    def dependency(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        if not identity.authorize(current_user, roles):
            raise Forbidden(f"User role {current_user.role} is not authorized to access this route")
        return current_user

    return dependency


require_admin = require_roles(ROLE_ADMIN)


def _set_auth_cookie(response: Response, token: str, expires_at: datetime, settings: Settings) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        expires=expires_at,
        httponly=True,
        secure=bool(settings.COOKIE_SECURE),
        samesite="lax",
    )


def _token_response(user: User, response: Response, settings: Settings) -> TokenResponse:
    token, expires_at = create_access_token(user.id, settings)
    _set_auth_cookie(response, token, expires_at, settings)
    return TokenResponse(id=user.id, name=user.name, email=user.email, token=token)


@router.post("/register", response_model=TokenResponse)
def register(
    body: RegisterRequest,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TokenResponse:
    """Create a local account with the user role and log it in."""
    user = credentials.register(db, body.name, body.email, body.tel, body.password, ROLE_USER)
    return _token_response(user, response, settings)


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TokenResponse:
    """
    Authenticate with email and password; returns a JWT and sets it as a cookie.
    Include the token in the Authorization header as: Bearer <token>
    """
    user = credentials.verify(db, body.email, body.password)
    if user is None:
        raise InvalidCredentials()
    return _token_response(user, response, settings)


@router.get("/me", response_model=UserResponse)
def get_me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    user = credentials.get_user(db, current_user.id)
    return UserResponse(data=UserOut.model_validate(user))


@router.put("/update", response_model=UserResponse)
def update_profile(
    body: ProfileUpdateRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Partial profile update of the logged-in user (name, tel; role for admins only)."""
    user = credentials.get_user(db, current_user.id)
    user = credentials.update_profile(
        db,
        user,
        name=body.name,
        tel=body.tel,
        role=body.role,
        actor_role=current_user.role,
    )
    return UserResponse(data=UserOut.model_validate(user))


@router.get("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    settings: Annotated[Settings, Depends(get_settings)],
) -> MessageResponse:
    """Overwrite the token cookie with a short-lived 'none' value."""
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value="none",
        max_age=LOGOUT_COOKIE_SECONDS,
        httponly=True,
        secure=bool(settings.COOKIE_SECURE),
        samesite="lax",
    )
    return MessageResponse(message="Logged out")


@router.post("/forgotpassword", response_model=MessageResponse)
def forgot_password(
    body: ForgotPasswordRequest,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> MessageResponse:
    """
    Mail a one-time reset link. The response is the same whether or not the email
    exists, and whether or not the mail could be sent.
    """
    user = credentials.get_user_by_email(db, body.email)
    if user is None:
        logger.info("Password reset requested for unknown email")
        return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)
    plain_token = credentials.issue_reset_token(db, user, settings)
    try:
        send_reset_email(user.email, plain_token, settings)
    except DomainError as e:
        credentials.clear_reset_token(db, user)
        logger.error(
            "Reset email not sent for user id=%s: %s: %s", user.id, type(e).__name__, e.message
        )
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.put("/resetpassword/{resettoken}", response_model=TokenResponse)
def reset_password(
    resettoken: str,
    body: ResetPasswordRequest,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TokenResponse:
    """Consume a reset token, set the new password, and log the user in."""
    if body.password != body.confirm_password:
        raise ValidationError("Passwords do not match")
    user = credentials.consume_reset_token(db, resettoken, body.password)
    return _token_response(user, response, settings)


@router.get("/csrf-token", response_model=CsrfTokenResponse)
def get_csrf_token(
    response: Response,
    settings: Annotated[Settings, Depends(get_settings)],
) -> CsrfTokenResponse:
    """Issue a CSRF pair: value in an HttpOnly cookie, signed token in the body for the request header."""
    cookie_value, header_token = issue_csrf_token(settings)
    response.set_cookie(
        key=settings.CSRF_COOKIE_NAME,
        value=cookie_value,
        httponly=True,
        secure=bool(settings.COOKIE_SECURE),
        samesite="strict",
    )
    return CsrfTokenResponse(csrf_token=header_token)


@router.get("/google")
def google_login(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> RedirectResponse:
    """Start Google OAuth: bind a state nonce to the session and redirect to the consent page."""
    url = oauth.authorization_url(oauth.issue_state(request.session), settings)
    return RedirectResponse(url, status_code=302)


def _frontend_callback(settings: Settings, params: dict[str, str]) -> RedirectResponse:
    url = f"{settings.FRONTEND_URL}/auth/google/callback?{urlencode(params, quote_via=quote)}"
    return RedirectResponse(url, status_code=302)


@router.get("/google/callback")
async def google_callback(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
) -> RedirectResponse:
    """
    Finish Google OAuth. The state nonce is checked before anything else; on success
    the identity token goes into the cookie and the browser is sent to the frontend
    with the user's public fields (never the token) in the query string.
    """
    try:
        oauth.consume_state(request.session, state)
    except OAuthCsrfMismatch:
        return _frontend_callback(settings, {"error": "csrf_mismatch"})
    if error or not code:
        logger.warning("Google OAuth returned without a code: error=%s", error)
        return _frontend_callback(settings, {"error": "authentication_failed"})
    try:
        userinfo = await oauth.fetch_google_userinfo(code, settings)
        # Blocking DB work and a bcrypt hash; keep them off the event loop.
        user = await run_in_threadpool(oauth.link_or_create, db, oauth.exchange_profile(userinfo))
    except DomainError as e:
        code_ = "server_error" if e.status_code >= 500 else "authentication_failed"
        logger.warning("Google OAuth callback failed: %s", type(e).__name__)
        return _frontend_callback(settings, {"error": code_})

    payload = {
        "_id": user.id,
        "name": user.name,
        "email": user.email,
        "tel": user.tel,
        "role": user.role,
    }
    redirect = _frontend_callback(
        settings, {"googleAuth": "true", "data": json.dumps(payload)}
    )
    token, expires_at = create_access_token(user.id, settings)
    _set_auth_cookie(redirect, token, expires_at, settings)
    return redirect


@router.get("/users", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UsersListResponse:
    """List all users (admin only)."""
    users = db.query(User).order_by(User.id).all()
    return UsersListResponse(
        count=len(users),
        data=[UserOut.model_validate(u) for u in users],
    )
