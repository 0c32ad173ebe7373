"""
Domain-level exceptions.

Services raise these to express rule violations; the API layer maps them to HTTP
responses through a single exception handler. Security failures carry
deliberately vague messages; the specific reason belongs in server logs.
"""


class DomainError(Exception):
    """Base class for all domain errors."""

    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DomainError):
    """Input is malformed or out of range (bad date ordering, night count, ...)."""

    status_code = 400
    default_message = "Invalid input"


class AuthenticationError(DomainError):
    """Missing, invalid or expired credentials. Never says which."""

    status_code = 401
    default_message = "Not authorized to access this route"


class InvalidToken(AuthenticationError):
    """Identity token is malformed or its signature does not match."""


class ExpiredToken(AuthenticationError):
    """Identity token has a valid signature but is past its expiry."""


class InvalidCredentials(AuthenticationError):
    """Unknown email or wrong password."""

    default_message = "Invalid credentials"


class InvalidOrExpiredToken(AuthenticationError):
    """Password reset token is unknown, already used, or expired."""

    status_code = 400
    default_message = "Invalid or expired reset token"


class OAuthCsrfMismatch(AuthenticationError):
    """OAuth state nonce is missing or does not match the one issued for the session."""

    default_message = "OAuth state mismatch"


class UnverifiedEmail(AuthenticationError):
    """Identity provider did not vouch for the account's email."""

    default_message = "Provider email is not verified"


class AuthorizationError(DomainError):
    """Authenticated, but not entitled to the resource or action."""

    status_code = 403
    default_message = "Not authorized to perform this action"


Forbidden = AuthorizationError


class CsrfTokenMismatch(AuthorizationError):
    """Double-submit CSRF token is missing or does not match its cookie."""

    default_message = "Invalid CSRF token"


class NotFoundError(DomainError):
    """Requested entity does not exist."""

    status_code = 404
    default_message = "Not found"


class HotelNotFound(NotFoundError):
    default_message = "No hotel with this id"


class BookingNotFound(NotFoundError):
    default_message = "No booking with this id"


class UserNotFound(NotFoundError):
    default_message = "No user with this id"


class ConflictError(DomainError):
    """A unique key is already taken; the message names the field."""

    status_code = 409
    default_message = "Duplicate value"

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"Duplicate value for field '{field}'")


DuplicateKey = ConflictError


class DependencyError(DomainError):
    """A collaborator (database, mail, identity provider) failed. Details stay in logs."""

    status_code = 500
    default_message = "Server error"


class OAuthNotConfigured(DependencyError):
    status_code = 503
    default_message = "OAuth login is not configured"
