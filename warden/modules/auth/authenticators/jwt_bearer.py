"""JWT bearer authenticator (token capability)."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import jwt
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..exceptions import AuthenticationError, BadCredentialsError
from ..interfaces import CredentialsCapability
from ..models import User
from .base import AbstractAuthenticator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClaimMapping:
    """Maps JWT claims to User fields."""

    username_claim: str = "sub"
    fallback_claim: Optional[str] = "email"
    roles_claim: str = "roles"


class JWTBearerAuthenticator(AbstractAuthenticator):
    """
    Validates "Authorization: Bearer <jwt>" headers with PyJWT.

    The signature and claims are verified during credential extraction,
    so the decoded claims are trusted afterwards.
    """

    capability = CredentialsCapability.TOKEN

    def __init__(
        self,
        key: str,
        *,
        algorithms: Optional[List[str]] = None,
        audience: Optional[str] = None,
        issuer: Optional[str] = None,
        claim_mapping: Optional[ClaimMapping] = None,
        require_claims: Optional[List[str]] = None,
    ):
        self.key = key
        self.algorithms = algorithms or ["HS256"]
        self.audience = audience
        self.issuer = issuer
        self.claim_mapping = claim_mapping or ClaimMapping()
        self.require_claims = require_claims if require_claims is not None else ["sub", "exp"]

    @staticmethod
    def _bearer(request: Request) -> Optional[str]:
        header = request.headers.get("authorization", "")
        if not header.lower().startswith("bearer "):
            return None
        return header[7:].strip() or None

    def supports(self, request: Request) -> bool:
        return self._bearer(request) is not None

    async def get_credentials(self, request: Request) -> Dict[str, Any]:
        token = self._bearer(request)
        try:
            kwargs: Dict[str, Any] = {
                "key": self.key,
                "algorithms": self.algorithms,
                "options": {"require": self.require_claims},
            }
            if self.audience is not None:
                kwargs["audience"] = self.audience
            if self.issuer is not None:
                kwargs["issuer"] = self.issuer

            return jwt.decode(token, **kwargs)
        except jwt.ExpiredSignatureError:
            raise BadCredentialsError("JWT has expired.")
        except jwt.InvalidTokenError as e:
            logger.debug("JWT validation failed", exc_info=True)
            raise BadCredentialsError(f"Invalid JWT: {e}")

    async def get_user(self, credentials: Dict[str, Any]) -> Optional[User]:
        mapping = self.claim_mapping
        username = credentials.get(mapping.username_claim)
        if username is None and mapping.fallback_claim:
            username = credentials.get(mapping.fallback_claim)
        if username is None:
            return None

        raw_roles = credentials.get(mapping.roles_claim)
        roles = [str(r) for r in raw_roles] if isinstance(raw_roles, list) else []

        return User(str(username), roles=roles, attributes={"claims": credentials, "auth_method": "jwt"})

    async def on_authentication_failure(
        self, request: Request, error: AuthenticationError
    ) -> Optional[Response]:
        return JSONResponse(
            status_code=401,
            content={"error": "Authentication failed: Invalid Bearer token", "status": 401},
            headers={"WWW-Authenticate": "Bearer"},
        )
