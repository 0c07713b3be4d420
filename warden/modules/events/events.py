"""Events dispatched by the authentication pipeline."""

from typing import Any, Optional

from starlette.requests import Request
from starlette.responses import Response

from ..auth.exceptions import AuthenticationError, LogicError
from ..auth.models import Token, User
from .dispatcher import Event


class VerifyAuthenticatorCredentialsEvent(Event):
    """
    Carries one verification attempt through the credential listeners.

    credentials_valid is a one-shot cell: None until a listener decides,
    then frozen.
    """

    def __init__(self, authenticator: Any, credentials: Any, user: User):
        super().__init__()
        self.authenticator = authenticator
        self.credentials = credentials
        self.user = user
        self._credentials_valid: Optional[bool] = None

    @property
    def credentials_valid(self) -> Optional[bool]:
        return self._credentials_valid

    def set_credentials_valid(self, valid: bool = True) -> None:
        if self._credentials_valid is not None:
            raise LogicError(
                f"Credentials validity for {type(self.authenticator).__name__} was already decided."
            )
        self._credentials_valid = bool(valid)

    def are_credentials_valid(self) -> bool:
        return self._credentials_valid is True


class AuthenticationSuccessEvent(Event):
    """A token was created for approved credentials."""

    def __init__(self, token: Token):
        super().__init__()
        self.token = token


class InteractiveLoginEvent(Event):
    """A token was stored for the current request."""

    def __init__(self, request: Request, token: Token):
        super().__init__()
        self.request = request
        self.token = token


class CredentialsValidEvent(Event):
    """Fired after the authenticator's success hook."""

    def __init__(
        self,
        authenticator: Any,
        token: Token,
        request: Request,
        response: Optional[Response],
        firewall: str,
    ):
        super().__init__()
        self.authenticator = authenticator
        self.token = token
        self.request = request
        self.response = response
        self.firewall = firewall


class CredentialsVerificationFailedEvent(Event):
    """Fired after the authenticator's failure hook."""

    def __init__(
        self,
        error: AuthenticationError,
        authenticator: Any,
        request: Request,
        response: Optional[Response],
        firewall: str,
    ):
        super().__init__()
        self.error = error
        self.authenticator = authenticator
        self.request = request
        self.response = response
        self.firewall = firewall
