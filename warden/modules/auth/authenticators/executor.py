"""
Executor token authenticator (custom capability).

Executors present a per-cluster token that is compared against the one
stored in Redis under executor:token:<cluster_id>.
"""

import logging
import secrets
from typing import Any, Dict, Optional

from starlette.requests import Request

from ..interfaces import CredentialsCapability
from ..models import User
from .base import AbstractAuthenticator

logger = logging.getLogger(__name__)


class ExecutorTokenAuthenticator(AbstractAuthenticator):
    """Authenticates executors by X-Cluster-ID plus a bearer token."""

    capability = CredentialsCapability.CUSTOM

    def __init__(self, redis_client, cluster_header: str = "x-cluster-id"):
        """
        Initialize executor authenticator.

        Args:
            redis_client: Async Redis client holding executor tokens
            cluster_header: Header carrying the cluster identifier
        """
        self.redis = redis_client
        self.cluster_header = cluster_header

    def supports(self, request: Request) -> bool:
        return bool(request.headers.get(self.cluster_header)) and request.headers.get(
            "authorization", ""
        ).startswith("Bearer ")

    async def get_credentials(self, request: Request) -> Dict[str, str]:
        return {
            "cluster_id": request.headers[self.cluster_header],
            "token": request.headers["authorization"][7:].strip(),
        }

    async def get_user(self, credentials: Dict[str, str]) -> Optional[User]:
        return User(f"executor:{credentials['cluster_id']}", roles=["ROLE_EXECUTOR"])

    async def check_credentials(self, credentials: Dict[str, Any], user: User) -> bool:
        token = credentials.get("token")
        if not token:
            return False

        stored_token = await self.redis.get(f"executor:token:{credentials['cluster_id']}")
        if not stored_token:
            logger.debug(f"No executor token stored for cluster {credentials['cluster_id']}")
            return False

        stored_token = stored_token.decode("utf-8") if isinstance(stored_token, bytes) else stored_token
        return secrets.compare_digest(token, stored_token)
