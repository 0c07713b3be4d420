"""
Pre-authentication provider.

Routes a PreAuthenticationToken back to the authenticator that
extracted its credentials and finishes the authentication. Also used
to re-validate a token found in storage at the start of a request.
"""

import logging
from typing import Any, Dict, Optional

from ..events.dispatcher import EventDispatcher
from .exceptions import AuthenticationExpiredError, InvalidTokenTypeError, ProviderNotFoundError
from .models import PreAuthenticationToken, Token
from .pipeline import authenticate_via_authenticator

logger = logging.getLogger(__name__)


class PreAuthenticationProvider:
    """Finishes authentication for tokens created outside the manager."""

    def __init__(
        self,
        authenticators: Dict[str, Any],
        firewall: str,
        event_dispatcher: EventDispatcher,
        erase_credentials: bool = True,
    ):
        self.authenticators = dict(authenticators)
        self.firewall = firewall
        self.event_dispatcher = event_dispatcher
        self.erase_credentials = erase_credentials

    def get_authenticator_key(self, key: str) -> str:
        """Key unique to one authenticator across firewalls."""
        return f"{self.firewall}_{key}"

    def create_token(self, key: str, credentials: Any) -> PreAuthenticationToken:
        """Wrap credentials extracted by the authenticator registered under key."""
        return PreAuthenticationToken(credentials, self.get_authenticator_key(key), self.firewall)

    def find_originating_authenticator(self, token: PreAuthenticationToken) -> Optional[Any]:
        for key, authenticator in self.authenticators.items():
            if self.get_authenticator_key(key) == token.authenticator_key:
                return authenticator

        # Other firewalls may own the token
        return None

    def supports(self, token: Any) -> bool:
        if isinstance(token, PreAuthenticationToken):
            return self.find_originating_authenticator(token) is not None
        return isinstance(token, Token)

    async def authenticate(self, token: Any) -> Token:
        """
        Authenticate a token.

        Raises:
            InvalidTokenTypeError: token is not a Token
            AuthenticationExpiredError: a stored token is no longer authenticated
            ProviderNotFoundError: no authenticator of this firewall created the token
        """
        if not isinstance(token, Token):
            raise InvalidTokenTypeError(
                f"{type(self).__name__} only supports Token instances, got {type(token).__name__}."
            )

        if not isinstance(token, PreAuthenticationToken):
            # Only pre-authentication tokens are expected here. Anything else is
            # a stored token; if it lost its authenticated flag the user must be
            # logged out.
            if token.authenticated:
                return token

            logger.info(f"Token for {token.username} on firewall {self.firewall} expired")
            raise AuthenticationExpiredError(token=token)

        authenticator = self.find_originating_authenticator(token)
        if authenticator is None:
            raise ProviderNotFoundError(
                f'Token with authenticator key "{token.authenticator_key}" did not originate '
                f'from any of the authenticators of firewall "{self.firewall}".',
                token=token,
            )

        return await authenticate_via_authenticator(
            authenticator,
            token.credentials,
            self.firewall,
            self.event_dispatcher,
            erase_credentials=self.erase_credentials,
        )
