"""
Credential verification listeners.

The verifier decides validity from the capability an authenticator
declares, so new credential schemes plug in without touching the
manager. Account checks and password upgrades run around it on the
same event.
"""

import logging
from typing import Any, Dict, List, Tuple, Type

from ..events.dispatcher import Event
from ..events.events import VerifyAuthenticatorCredentialsEvent
from .exceptions import BadCredentialsError, InvalidUsageError, MisconfiguredAuthenticatorError
from .interfaces import CredentialsCapability, PasswordMatcher, PasswordUpgrader, UserChecker

logger = logging.getLogger(__name__)

PRE_CHECK_PRIORITY = 256
VERIFY_PRIORITY = 128
PASSWORD_UPGRADE_PRIORITY = 64
POST_CHECK_PRIORITY = 32


class CredentialsVerifier:
    """Sets credentials validity on VerifyAuthenticatorCredentialsEvent."""

    def __init__(self, password_matcher: PasswordMatcher):
        self.password_matcher = password_matcher

    @staticmethod
    def get_subscribed_events() -> Dict[Type[Event], List[Tuple[str, int]]]:
        return {VerifyAuthenticatorCredentialsEvent: [("on_authenticating", VERIFY_PRIORITY)]}

    async def on_authenticating(self, event: VerifyAuthenticatorCredentialsEvent) -> None:
        if event.credentials_valid is not None:
            return

        authenticator = event.authenticator
        capability = getattr(authenticator, "capability", None)

        if capability == CredentialsCapability.PASSWORD:
            presented = authenticator.get_password(event.credentials)
            if not presented:
                raise BadCredentialsError("The presented password cannot be empty.")

            # Passwordless users (e.g. pre-authenticated) are accepted as is
            if event.user.password is None:
                event.set_credentials_valid(True)
                return

            event.set_credentials_valid(
                self.password_matcher.matches(event.user.password, presented, event.user.salt)
            )

        elif capability == CredentialsCapability.TOKEN:
            event.set_credentials_valid(True)

        elif capability == CredentialsCapability.CUSTOM:
            result = await authenticator.check_credentials(event.credentials, event.user)
            if not isinstance(result, bool):
                raise InvalidUsageError(
                    f"{type(authenticator).__name__}.check_credentials() must return a bool, "
                    f"got {type(result).__name__}."
                )
            event.set_credentials_valid(result)

        else:
            logger.error(
                f"Authenticator {type(authenticator).__name__} declares no credentials capability"
            )
            raise MisconfiguredAuthenticatorError(
                f"Authenticator {type(authenticator).__name__} does not have valid credentials. "
                f"Authenticators must declare one of the capabilities "
                f"{', '.join(c.value for c in CredentialsCapability)}."
            )


class UserCheckerListener:
    """Runs account checks before and after verification."""

    def __init__(self, user_checker: UserChecker):
        self.user_checker = user_checker

    @staticmethod
    def get_subscribed_events() -> Dict[Type[Event], List[Tuple[str, int]]]:
        return {
            VerifyAuthenticatorCredentialsEvent: [
                ("pre_credentials_verification", PRE_CHECK_PRIORITY),
                ("post_credentials_verification", POST_CHECK_PRIORITY),
            ]
        }

    def pre_credentials_verification(self, event: VerifyAuthenticatorCredentialsEvent) -> None:
        self.user_checker.check_pre_auth(event.user)

    def post_credentials_verification(self, event: VerifyAuthenticatorCredentialsEvent) -> None:
        if not event.are_credentials_valid():
            return
        self.user_checker.check_post_auth(event.user)


class PasswordMigratingListener:
    """Rehashes the password when the matcher reports an outdated hash."""

    def __init__(self, password_matcher: PasswordMatcher, user_provider: Any):
        self.password_matcher = password_matcher
        self.user_provider = user_provider

    @staticmethod
    def get_subscribed_events() -> Dict[Type[Event], List[Tuple[str, int]]]:
        return {
            VerifyAuthenticatorCredentialsEvent: [("on_credentials_verification", PASSWORD_UPGRADE_PRIORITY)]
        }

    async def on_credentials_verification(self, event: VerifyAuthenticatorCredentialsEvent) -> None:
        if not event.are_credentials_valid():
            return
        if getattr(event.authenticator, "capability", None) != CredentialsCapability.PASSWORD:
            return
        if not isinstance(self.user_provider, PasswordUpgrader):
            return

        needs_rehash = getattr(self.password_matcher, "needs_rehash", None)
        if needs_rehash is None or not needs_rehash(event.user):
            return

        presented = event.authenticator.get_password(event.credentials)
        if not presented:
            return

        logger.info(f"Upgrading password hash for user {event.user.username}")
        await self.user_provider.upgrade_password(
            event.user, self.password_matcher.hash(presented, event.user.salt)
        )


def register_verification_listeners(
    dispatcher: Any,
    password_matcher: PasswordMatcher,
    user_checker: UserChecker,
    user_provider: Any = None,
) -> None:
    """Wire the verification listeners onto a dispatcher."""
    dispatcher.add_subscriber(UserCheckerListener(user_checker))
    dispatcher.add_subscriber(CredentialsVerifier(password_matcher))
    if user_provider is not None:
        dispatcher.add_subscriber(PasswordMigratingListener(password_matcher, user_provider))
