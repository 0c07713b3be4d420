"""
Remember-me authenticator.

Runs when the session expired but a remember-me cookie is present, and
re-authenticates the user from the cookie. Decoding and validating the
cookie payload is delegated to the remember-me services.
"""

import base64
import binascii
import logging
from typing import Any, Dict, List, Optional

from starlette.requests import Request
from starlette.responses import Response

from ..exceptions import AuthenticationError, RememberMeError
from ..interfaces import (
    CredentialsCapability,
    RememberMeServices,
    SessionAuthenticationStrategy,
    SupportDecision,
    TokenStorage,
)
from ..models import RememberMeToken, Token, User
from .base import AbstractAuthenticator

logger = logging.getLogger(__name__)

COOKIE_DELIMITER = ":"
# Set to None on request.state once the cookie was cancelled in this request
COOKIE_ATTR_NAME = "_warden_remember_me_cookie"
_MISSING = object()


def decode_cookie(value: str) -> List[str]:
    """Split a base64 remember-me cookie into its parts ([] when undecodable)."""
    try:
        decoded = base64.b64decode(value.encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError):
        return []
    return decoded.split(COOKIE_DELIMITER)


class RememberMeAuthenticator(AbstractAuthenticator):
    """Authenticates users from the remember-me cookie."""

    capability = CredentialsCapability.TOKEN

    def __init__(
        self,
        remember_me_services: RememberMeServices,
        secret: str,
        token_storage: TokenStorage,
        options: Dict[str, Any],
        session_strategy: Optional[SessionAuthenticationStrategy] = None,
    ):
        """
        Initialize remember-me authenticator.

        Args:
            remember_me_services: Cookie decoding and validation
            secret: Secret stored on created tokens
            token_storage: Storage checked for an existing token
            options: Remember-me options; "name" is the cookie name
            session_strategy: Session fixation strategy re-run on success
        """
        self.remember_me_services = remember_me_services
        self.secret = secret
        self.token_storage = token_storage
        self.options = options
        self.session_strategy = session_strategy

    @property
    def cookie_name(self) -> str:
        return self.options.get("name", "REMEMBERME")

    def supports(self, request: Request) -> SupportDecision:
        # Do not overwrite an already stored token (e.g. from the session)
        if self.token_storage.get_token() is not None:
            return SupportDecision.NOT_SUPPORTED

        if getattr(request.state, COOKIE_ATTR_NAME, _MISSING) is None:
            return SupportDecision.NOT_SUPPORTED

        if self.cookie_name not in request.cookies:
            return SupportDecision.NOT_SUPPORTED

        # Lazy: the decision depends on the session being loaded
        return SupportDecision.SUPPORTED_LAZILY

    async def get_credentials(self, request: Request) -> Dict[str, Any]:
        return {
            "cookie_parts": decode_cookie(request.cookies.get(self.cookie_name, "")),
            "request": request,
        }

    async def get_user(self, credentials: Dict[str, Any]) -> Optional[User]:
        try:
            return await self.remember_me_services.perform_login(
                credentials["cookie_parts"], credentials["request"]
            )
        except RememberMeError as e:
            logger.debug(f"Remember-me cookie rejected: {e}")
            return None

    def create_authenticated_token(self, user: User, firewall: str) -> Token:
        return RememberMeToken(user, firewall, self.secret)

    async def on_authentication_failure(
        self, request: Request, error: AuthenticationError
    ) -> Optional[Response]:
        await self.remember_me_services.login_fail(request, error)
        return None

    async def on_authentication_success(
        self, request: Request, token: Token, firewall: str
    ) -> Optional[Response]:
        if self.session_strategy is not None and request.scope.get("session"):
            self.session_strategy.on_authentication(request, token)
        return None
