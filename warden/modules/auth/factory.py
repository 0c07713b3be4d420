"""
Firewall Factory following Black Box Design principles.

This factory:
- Constructs the authentication stack based on configuration
- Wires listeners and authenticators together
- Returns only the Firewall facade (hiding implementation)
"""

import logging
from typing import Any, Dict, Optional

from ...config.provider import ConfigProvider
from ..audit import AuditListener
from ..events.dispatcher import EventDispatcher
from .authenticators import (
    AnonymousAuthenticator,
    ApiKeyAuthenticator,
    ExecutorTokenAuthenticator,
    FormLoginAuthenticator,
    JWTBearerAuthenticator,
    RememberMeAuthenticator,
    parse_api_keys,
)
from .interfaces import PasswordMatcher, RememberMeServices, TokenStorage, UserChecker, UserProvider
from .listeners import RememberMeListener, SessionListener
from .manager import AuthenticatorManager
from .provider import PreAuthenticationProvider
from .service import Firewall
from .session import SessionStrategy
from .storage import ContextTokenStorage
from .users import DefaultUserChecker, InMemoryUserProvider, Pbkdf2PasswordMatcher
from .verifier import register_verification_listeners

logger = logging.getLogger(__name__)


class FirewallFactory:
    """
    Factory for building a firewall.

    This is the composition root that:
    - Creates all auth components
    - Wires them together via dependency injection
    - Returns only the public interface
    """

    @staticmethod
    def build(
        config_provider: ConfigProvider,
        user_provider: Optional[UserProvider] = None,
        redis_client: Optional[Any] = None,
        remember_me_services: Optional[RememberMeServices] = None,
        password_matcher: Optional[PasswordMatcher] = None,
        user_checker: Optional[UserChecker] = None,
        token_storage: Optional[TokenStorage] = None,
    ) -> Firewall:
        """
        Build the complete authentication stack.

        Args:
            config_provider: Configuration provider
            user_provider: Users for form login (empty in-memory provider by default)
            redis_client: Optional Redis client for executor tokens and audit logging
            remember_me_services: Required when remember-me is enabled
            password_matcher: Password hashing collaborator
            user_checker: Account status checks
            token_storage: Token storage (ContextVar-based by default)

        Returns:
            Firewall facade (hides all implementation details)
        """
        firewall_config = config_provider.get_firewall_config()
        api_key_config = config_provider.get_api_key_config()
        jwt_config = config_provider.get_jwt_config()
        remember_me_config = config_provider.get_remember_me_config()

        user_provider = user_provider or InMemoryUserProvider()
        password_matcher = password_matcher or Pbkdf2PasswordMatcher()
        user_checker = user_checker or DefaultUserChecker()
        token_storage = token_storage or ContextTokenStorage()
        firewall = firewall_config.name

        dispatcher = EventDispatcher()
        register_verification_listeners(dispatcher, password_matcher, user_checker, user_provider)

        session_strategy = SessionStrategy(firewall_config.session_strategy)
        dispatcher.add_subscriber(
            SessionListener(
                session_strategy,
                stateless_firewalls=[firewall] if firewall_config.stateless else [],
            )
        )

        # Registration order is precedence order
        authenticators: Dict[str, Any] = {}

        if redis_client is not None:
            authenticators["executor"] = ExecutorTokenAuthenticator(redis_client)

        if jwt_config.is_configured:
            logger.info(f"Firewall {firewall}: JWT bearer authentication enabled")
            authenticators["jwt"] = JWTBearerAuthenticator(
                jwt_config.secret,
                algorithms=jwt_config.algorithms,
                audience=jwt_config.audience,
                issuer=jwt_config.issuer,
            )

        if api_key_config.enabled:
            logger.info(f"Firewall {firewall}: API key authentication enabled")
            authenticators["api_key"] = ApiKeyAuthenticator(parse_api_keys(api_key_config.api_keys))

        if not firewall_config.stateless:
            authenticators["form_login"] = FormLoginAuthenticator(
                user_provider,
                check_path=firewall_config.login_check_path,
                login_path=firewall_config.login_path,
                default_target_path=firewall_config.default_target_path,
            )

        if remember_me_config.enabled:
            if remember_me_services is None:
                raise ValueError("REMEMBER_ME_ENABLED requires remember_me_services.")
            logger.info(f"Firewall {firewall}: remember-me enabled (cookie {remember_me_config.cookie_name})")
            authenticators["remember_me"] = RememberMeAuthenticator(
                remember_me_services,
                firewall_config.secret,
                token_storage,
                {"name": remember_me_config.cookie_name, "lifetime": remember_me_config.lifetime},
                session_strategy,
            )
            dispatcher.add_subscriber(RememberMeListener(remember_me_services, firewall))

        if firewall_config.anonymous_enabled:
            authenticators["anonymous"] = AnonymousAuthenticator(firewall_config.secret, token_storage)

        if redis_client is not None:
            dispatcher.add_subscriber(AuditListener(redis_client))

        logger.info(f"Firewall {firewall} built with authenticators: {', '.join(authenticators) or 'none'}")

        return FirewallFactory.assemble(
            firewall,
            authenticators,
            token_storage,
            dispatcher,
            erase_credentials=firewall_config.erase_credentials,
            lazy=firewall_config.lazy,
        )

    @staticmethod
    def assemble(
        firewall: str,
        authenticators: Dict[str, Any],
        token_storage: TokenStorage,
        dispatcher: EventDispatcher,
        erase_credentials: bool = True,
        lazy: bool = False,
    ) -> Firewall:
        """Assemble a firewall from pre-built parts."""
        manager = AuthenticatorManager(
            authenticators, token_storage, dispatcher, firewall, erase_credentials=erase_credentials
        )
        provider = PreAuthenticationProvider(
            authenticators, firewall, dispatcher, erase_credentials=erase_credentials
        )
        return Firewall(firewall, manager, provider, token_storage, lazy=lazy)

    @staticmethod
    def build_for_testing(
        authenticators: Dict[str, Any],
        password_matcher: Optional[PasswordMatcher] = None,
        user_checker: Optional[UserChecker] = None,
        firewall: str = "main",
    ) -> Firewall:
        """
        Build a firewall around the given authenticators with default listeners.

        Args:
            authenticators: Authenticators keyed by unique key, in priority order
            password_matcher: Mock or real password matcher
            user_checker: Mock or real user checker
            firewall: Firewall name

        Returns:
            Firewall for testing
        """
        dispatcher = EventDispatcher()
        register_verification_listeners(
            dispatcher,
            password_matcher or Pbkdf2PasswordMatcher(iterations=1000),
            user_checker or DefaultUserChecker(),
        )
        return FirewallFactory.assemble(firewall, authenticators, ContextTokenStorage(), dispatcher)
