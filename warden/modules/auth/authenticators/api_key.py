"""
API key authenticator for services and machines.

Keys are configured as "key" or "service:key" entries; the service
name becomes the username (plain keys map to "api-client").
"""

import logging
import secrets
from typing import Dict, List, Optional

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..exceptions import AuthenticationError
from ..interfaces import CredentialsCapability
from ..models import User
from .base import AbstractAuthenticator

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_IDENTITY = "api-client"


def parse_api_keys(entries: List[str]) -> Dict[str, Optional[str]]:
    """
    Parse API key entries into {key: service_identity}.

    Example:
        >>> parse_api_keys(["abc123", "orchestrator:def456"])
        {'abc123': None, 'def456': 'orchestrator'}
    """
    keys: Dict[str, Optional[str]] = {}
    for entry in entries:
        entry = entry.strip()
        if not entry:
            continue

        if ":" in entry:
            service, key = entry.split(":", 1)
            keys[key.strip()] = service.strip()
        else:
            keys[entry] = None

    return keys


class ApiKeyAuthenticator(AbstractAuthenticator):
    """
    Authenticates the X-API-Key header.

    The key is validated while resolving the user, so no secondary
    credential check is needed (token capability).
    """

    capability = CredentialsCapability.TOKEN

    def __init__(
        self,
        api_keys: Dict[str, Optional[str]],
        header_names: Optional[List[str]] = None,
        roles: Optional[List[str]] = None,
    ):
        self.api_keys = api_keys
        self.header_names = header_names or ["x-api-key"]
        self.roles = roles or ["ROLE_SERVICE"]

    def _extract(self, request: Request) -> Optional[str]:
        for header_name in self.header_names:
            api_key = request.headers.get(header_name)
            if api_key:
                return api_key
        return None

    def supports(self, request: Request) -> bool:
        return self._extract(request) is not None

    async def get_credentials(self, request: Request) -> str:
        return self._extract(request)

    async def get_user(self, credentials: str) -> Optional[User]:
        for key, service_identity in self.api_keys.items():
            # Constant-time comparison for every configured key
            if secrets.compare_digest(credentials.encode(), key.encode()):
                return User(
                    service_identity or DEFAULT_SERVICE_IDENTITY,
                    roles=list(self.roles),
                    attributes={"auth_method": "api_key"},
                )

        logger.warning(f"Invalid API key attempted: {credentials[:8]}...")
        return None

    async def on_authentication_failure(
        self, request: Request, error: AuthenticationError
    ) -> Optional[Response]:
        return JSONResponse(
            status_code=401,
            content={"error": "Authentication failed: Invalid API key", "status": 401},
        )
