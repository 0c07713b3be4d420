"""
Shared pytest fixtures for Warden tests.

This module provides common fixtures including:
- Starlette request builder (no server needed)
- Mock authenticators with call recording
- Redis mocks for executor tokens and audit logging
"""

import json
import os
import sys
from typing import Any, Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from starlette.requests import Request

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from warden.config.provider import (
    APIConfig,
    ApiKeyConfig,
    FirewallConfig,
    JWTConfig,
    RedisConfig,
    RememberMeConfig,
)
from warden.modules.auth.interfaces import CredentialsCapability
from warden.modules.auth.models import PostAuthenticationToken, User
from warden.modules.auth.storage import ContextTokenStorage
from warden.modules.events.dispatcher import EventDispatcher


# =============================================================================
# Request Building
# =============================================================================

def build_request(
    method: str = "GET",
    path: str = "/",
    headers: Optional[Dict[str, str]] = None,
    cookies: Optional[Dict[str, str]] = None,
    body: bytes = b"",
    json_body: Any = None,
    session: Optional[dict] = None,
) -> Request:
    """Build a Starlette request from a raw ASGI scope."""
    headers = dict(headers or {})
    if json_body is not None:
        body = json.dumps(json_body).encode()
        headers.setdefault("content-type", "application/json")
    if cookies:
        headers["cookie"] = "; ".join(f"{k}={v}" for k, v in cookies.items())

    scope = {
        "type": "http",
        "method": method,
        "scheme": "http",
        "server": ("testserver", 80),
        "client": ("127.0.0.1", 50000),
        "path": path,
        "root_path": "",
        "query_string": b"",
        "headers": [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in headers.items()],
        "state": {},
    }
    if session is not None:
        scope["session"] = session

    async def receive():
        return {"type": "http.request", "body": body, "more_body": False}

    return Request(scope, receive)


@pytest.fixture
def make_request():
    """Factory fixture returning build_request."""
    return build_request


# =============================================================================
# Authenticators
# =============================================================================

def make_authenticator(
    supports: Any = True,
    credentials: Any = None,
    user: Any = "default",
    capability: Optional[CredentialsCapability] = CredentialsCapability.TOKEN,
    success_response: Any = None,
    failure_response: Any = None,
    remember_me: bool = False,
) -> MagicMock:
    """
    Create a mock authenticator.

    supports may be a single value or a list (side effect per call).
    """
    authenticator = MagicMock()
    authenticator.capability = capability
    if isinstance(supports, list):
        authenticator.supports = MagicMock(side_effect=supports)
    else:
        authenticator.supports = MagicMock(return_value=supports)
    authenticator.get_credentials = AsyncMock(
        return_value={"token": "abc"} if credentials is None else credentials
    )
    authenticator.get_user = AsyncMock(
        return_value=User("alice", roles=["ROLE_USER"]) if user == "default" else user
    )
    authenticator.create_authenticated_token = MagicMock(
        side_effect=lambda u, firewall: PostAuthenticationToken(u, firewall, u.roles)
    )
    authenticator.on_authentication_success = AsyncMock(return_value=success_response)
    authenticator.on_authentication_failure = AsyncMock(return_value=failure_response)
    authenticator.supports_remember_me = MagicMock(return_value=remember_me)
    authenticator.check_credentials = AsyncMock(return_value=True)
    authenticator.get_password = MagicMock(return_value="secret")
    return authenticator


@pytest.fixture
def authenticator_factory():
    return make_authenticator


@pytest.fixture
def token_storage():
    """Fresh ContextTokenStorage (a new ContextVar per test)."""
    return ContextTokenStorage()


@pytest.fixture
def dispatcher():
    return EventDispatcher()


@pytest.fixture
def user_checker():
    checker = MagicMock()
    checker.check_pre_auth = MagicMock()
    checker.check_post_auth = MagicMock()
    return checker


@pytest.fixture
def password_matcher():
    matcher = MagicMock()
    matcher.matches = MagicMock(return_value=True)
    matcher.needs_rehash = MagicMock(return_value=False)
    matcher.hash = MagicMock(return_value="new-hash")
    return matcher


# =============================================================================
# Configuration
# =============================================================================

class StaticConfigProvider:
    """Config provider with fixed values."""

    def __init__(self, api_keys=None, anonymous_enabled=True, stateless=False, remember_me=False):
        self.api_keys = api_keys or []
        self.anonymous_enabled = anonymous_enabled
        self.stateless = stateless
        self.remember_me = remember_me

    def get_firewall_config(self) -> FirewallConfig:
        return FirewallConfig(
            name="main",
            secret="test-secret",
            stateless=self.stateless,
            anonymous_enabled=self.anonymous_enabled,
        )

    def get_api_key_config(self) -> ApiKeyConfig:
        return ApiKeyConfig(enabled=bool(self.api_keys), api_keys=self.api_keys)

    def get_jwt_config(self) -> JWTConfig:
        return JWTConfig(secret=None, algorithms=["HS256"], audience=None, issuer=None)

    def get_remember_me_config(self) -> RememberMeConfig:
        return RememberMeConfig(enabled=self.remember_me, cookie_name="REMEMBERME", lifetime=60)

    def get_redis_config(self) -> RedisConfig:
        return RedisConfig(host="localhost", port=6379, db=0, password=None)

    def get_api_config(self) -> APIConfig:
        return APIConfig(port=8080, host="127.0.0.1", debug=False, log_level="DEBUG")


# =============================================================================
# Redis Mocks
# =============================================================================

@pytest.fixture
def mock_redis():
    """Create a mock Redis client for async operations."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock()
    redis.delete = AsyncMock(return_value=1)
    redis.lpush = AsyncMock()
    redis.ltrim = AsyncMock()
    return redis


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Tests running a full FastAPI application"
    )
