"""
Authentication error taxonomy.

Two families live here:
- AuthenticationError and subclasses: recoverable, per-request failures.
  The manager catches these and turns them into failure hooks.
- InvalidUsageError / LogicError: programmer or configuration bugs.
  These are never caught inside the pipeline.
"""

from typing import Any, Dict, Optional


class AuthenticationError(Exception):
    """Base class for every recoverable authentication failure."""

    message_key = "An authentication exception occurred."

    def __init__(self, message: str = "", token: Optional[Any] = None):
        super().__init__(message or self.message_key)
        self.token = token

    @property
    def message_data(self) -> Dict[str, Any]:
        """Placeholders for the safe message (none by default)."""
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form used by audit events and JSON error bodies."""
        return {
            "type": type(self).__name__,
            "message": self.message_key,
            "detail": str(self),
        }


class BadCredentialsError(AuthenticationError):
    message_key = "Invalid credentials."


class UserNotFoundError(AuthenticationError):
    message_key = "Username could not be found."

    def __init__(self, message: str = "", username: Optional[str] = None):
        super().__init__(message)
        self.username = username

    @property
    def message_data(self) -> Dict[str, Any]:
        return {"username": self.username}


class AuthenticationExpiredError(AuthenticationError):
    """A previously authenticated token is no longer valid."""

    message_key = "Authentication expired because your account information has changed."


class ProviderNotFoundError(AuthenticationError):
    """A pre-authentication token references no live authenticator."""

    message_key = "No authentication provider found to support the authentication token."


class RememberMeError(AuthenticationError):
    message_key = "Invalid remember-me cookie."


class AccountStatusError(AuthenticationError):
    """Raised by user checkers when the account state forbids login."""

    message_key = "Account is not usable."

    def __init__(self, message: str = "", user: Optional[Any] = None):
        super().__init__(message)
        self.user = user


class DisabledError(AccountStatusError):
    message_key = "Account is disabled."


class LockedError(AccountStatusError):
    message_key = "Account is locked."


class AccountExpiredError(AccountStatusError):
    message_key = "Account has expired."


class CredentialsExpiredError(AccountStatusError):
    message_key = "Credentials have expired."


class InvalidUsageError(Exception):
    """An authenticator broke its contract (programmer error)."""


class InvalidTokenTypeError(InvalidUsageError):
    """Something other than a Token was handed to the pipeline."""


class LogicError(Exception):
    """Invalid state reached inside the pipeline."""


class MisconfiguredAuthenticatorError(LogicError):
    """Authenticator declares no recognized credentials capability."""
