"""Form/JSON login authenticator (password capability)."""

import logging
from typing import Any, Optional
from urllib.parse import urlencode

from pydantic import BaseModel, Field, ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response

from ..exceptions import AuthenticationError, BadCredentialsError
from ..interfaces import CredentialsCapability, UserProvider
from ..models import Token, User
from .base import AbstractAuthenticator

logger = logging.getLogger(__name__)


class LoginPayload(BaseModel):
    """Credentials posted to the login check path."""

    username: str = Field(..., min_length=1, max_length=4096)
    password: str = Field(default="")
    remember_me: bool = Field(default=False)


class FormLoginAuthenticator(AbstractAuthenticator):
    """
    Authenticates a username/password pair posted to the check path.

    Accepts application/json and form-encoded bodies. Browsers are
    redirected; JSON clients get a JSON body.
    """

    capability = CredentialsCapability.PASSWORD

    def __init__(
        self,
        user_provider: UserProvider,
        check_path: str = "/login_check",
        login_path: str = "/login",
        default_target_path: str = "/",
    ):
        self.user_provider = user_provider
        self.check_path = check_path
        self.login_path = login_path
        self.default_target_path = default_target_path

    def supports(self, request: Request) -> bool:
        return request.method == "POST" and request.url.path == self.check_path

    @staticmethod
    def _is_json(request: Request) -> bool:
        return "application/json" in request.headers.get("content-type", "")

    async def get_credentials(self, request: Request) -> LoginPayload:
        if self._is_json(request):
            try:
                data: Any = await request.json()
            except ValueError:
                raise BadCredentialsError("Invalid JSON login payload.")
        else:
            data = dict(await request.form())

        if not isinstance(data, dict):
            raise BadCredentialsError("Invalid login payload.")

        try:
            return LoginPayload.model_validate(data)
        except ValidationError as e:
            raise BadCredentialsError(f"Invalid login payload: {e.error_count()} error(s).")

    async def get_user(self, credentials: LoginPayload) -> Optional[User]:
        return await self.user_provider.load_user(credentials.username)

    def get_password(self, credentials: LoginPayload) -> Optional[str]:
        return credentials.password

    async def on_authentication_success(
        self, request: Request, token: Token, firewall: str
    ) -> Optional[Response]:
        if self._is_json(request):
            return JSONResponse({"user": token.username, "roles": token.roles})
        return RedirectResponse(self.default_target_path, status_code=303)

    async def on_authentication_failure(
        self, request: Request, error: AuthenticationError
    ) -> Optional[Response]:
        if self._is_json(request):
            return JSONResponse({"error": error.message_key, "status": 401}, status_code=401)
        query = urlencode({"error": error.message_key})
        return RedirectResponse(f"{self.login_path}?{query}", status_code=303)

    def supports_remember_me(self) -> bool:
        return True
