"""Authenticators shipped with Warden."""

from .anonymous import AnonymousAuthenticator
from .api_key import ApiKeyAuthenticator, parse_api_keys
from .base import AbstractAuthenticator
from .executor import ExecutorTokenAuthenticator
from .form_login import FormLoginAuthenticator, LoginPayload
from .jwt_bearer import ClaimMapping, JWTBearerAuthenticator
from .remember_me import RememberMeAuthenticator

__all__ = [
    "AbstractAuthenticator",
    "AnonymousAuthenticator",
    "ApiKeyAuthenticator",
    "ClaimMapping",
    "ExecutorTokenAuthenticator",
    "FormLoginAuthenticator",
    "JWTBearerAuthenticator",
    "LoginPayload",
    "RememberMeAuthenticator",
    "parse_api_keys",
]
