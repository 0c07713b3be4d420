"""
Single-authenticator verification step shared by the manager and the
pre-authentication provider.
"""

import logging
from typing import Any

from ..events.dispatcher import EventDispatcher
from ..events.events import AuthenticationSuccessEvent, VerifyAuthenticatorCredentialsEvent
from .exceptions import BadCredentialsError, InvalidTokenTypeError, UserNotFoundError
from .models import Token

logger = logging.getLogger(__name__)


async def authenticate_via_authenticator(
    authenticator: Any,
    credentials: Any,
    firewall: str,
    dispatcher: EventDispatcher,
    erase_credentials: bool = False,
) -> Token:
    """
    Turn credentials into an authenticated token.

    Args:
        authenticator: Authenticator that extracted the credentials
        credentials: Raw credentials
        firewall: Scope key stored on the token
        dispatcher: Dispatcher carrying the verification listeners
        erase_credentials: Clear secret material from the created token

    Returns:
        Authenticated token

    Raises:
        UserNotFoundError: get_user() returned None
        BadCredentialsError: no listener approved the credentials
        InvalidTokenTypeError: create_authenticated_token() returned a non-Token
    """
    name = type(authenticator).__name__

    user = await authenticator.get_user(credentials)
    if user is None:
        raise UserNotFoundError(f"None returned from {name}.get_user()")

    event = await dispatcher.dispatch(VerifyAuthenticatorCredentialsEvent(authenticator, credentials, user))
    if not event.are_credentials_valid():
        raise BadCredentialsError(
            f"Authentication failed because {name} did not approve the credentials."
        )

    token = authenticator.create_authenticated_token(user, firewall)
    if not isinstance(token, Token):
        raise InvalidTokenTypeError(
            f"The {name}.create_authenticated_token() method must return a Token. "
            f"You returned {type(token).__name__}."
        )

    if erase_credentials:
        token.erase_credentials()

    await dispatcher.dispatch(AuthenticationSuccessEvent(token))

    return token
