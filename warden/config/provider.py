"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass, field
from typing import List, Optional, Protocol


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class FirewallConfig:
    """Firewall (authentication scope) configuration."""
    name: str
    secret: str
    lazy: bool = False
    stateless: bool = False
    erase_credentials: bool = True
    anonymous_enabled: bool = True
    login_path: str = "/login"
    login_check_path: str = "/login_check"
    default_target_path: str = "/"
    session_strategy: str = "migrate"
    skip_paths: List[str] = field(default_factory=lambda: ["/health"])


@dataclass
class ApiKeyConfig:
    """API key authentication configuration."""
    enabled: bool
    api_keys: List[str]


@dataclass
class JWTConfig:
    """JWT bearer authentication configuration."""
    secret: Optional[str]
    algorithms: List[str]
    audience: Optional[str]
    issuer: Optional[str]

    @property
    def is_configured(self) -> bool:
        return bool(self.secret)


@dataclass
class RememberMeConfig:
    """Remember-me configuration."""
    enabled: bool
    cookie_name: str
    lifetime: int


@dataclass
class RedisConfig:
    """Redis configuration."""
    host: str
    port: int
    db: int
    password: Optional[str]

    @property
    def url(self) -> str:
        return f"redis://{self.host}:{self.port}/{self.db}"


@dataclass
class APIConfig:
    """API configuration."""
    port: int
    host: str
    debug: bool
    log_level: str


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_firewall_config(self) -> FirewallConfig:
        ...

    def get_api_key_config(self) -> ApiKeyConfig:
        ...

    def get_jwt_config(self) -> JWTConfig:
        ...

    def get_remember_me_config(self) -> RememberMeConfig:
        ...

    def get_redis_config(self) -> RedisConfig:
        ...

    def get_api_config(self) -> APIConfig:
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_firewall_config(self) -> FirewallConfig:
        """Get firewall configuration from environment variables."""
        # The secret signs anonymous and remember-me tokens - no default for security
        secret = os.getenv("APP_SECRET")
        if not secret:
            raise ValueError(
                "APP_SECRET environment variable is required. "
                "Set it to a long random value, e.g. the output of `openssl rand -hex 32`."
            )

        skip_paths = os.getenv("FIREWALL_SKIP_PATHS", "/health")

        return FirewallConfig(
            name=os.getenv("FIREWALL_NAME", "main"),
            secret=secret,
            lazy=_flag("FIREWALL_LAZY", "false"),
            stateless=_flag("STATELESS", "false"),
            erase_credentials=_flag("ERASE_CREDENTIALS", "true"),
            anonymous_enabled=_flag("ANONYMOUS_ENABLED", "true"),
            login_path=os.getenv("LOGIN_PATH", "/login"),
            login_check_path=os.getenv("LOGIN_CHECK_PATH", "/login_check"),
            default_target_path=os.getenv("DEFAULT_TARGET_PATH", "/"),
            session_strategy=os.getenv("SESSION_STRATEGY", "migrate").lower(),
            skip_paths=[p.strip() for p in skip_paths.split(",") if p.strip()],
        )

    def get_api_key_config(self) -> ApiKeyConfig:
        """Get API key configuration (format: key or service:key, comma separated)."""
        api_keys = [key.strip() for key in os.getenv("API_KEYS", "").split(",") if key.strip()]
        return ApiKeyConfig(enabled=bool(api_keys), api_keys=api_keys)

    def get_jwt_config(self) -> JWTConfig:
        """Get JWT configuration from environment variables."""
        return JWTConfig(
            secret=os.getenv("JWT_SECRET"),
            algorithms=os.getenv("JWT_ALGORITHMS", "HS256").split(","),
            audience=os.getenv("JWT_AUDIENCE"),
            issuer=os.getenv("JWT_ISSUER"),
        )

    def get_remember_me_config(self) -> RememberMeConfig:
        """Get remember-me configuration from environment variables."""
        return RememberMeConfig(
            enabled=_flag("REMEMBER_ME_ENABLED", "false"),
            cookie_name=os.getenv("REMEMBER_ME_COOKIE", "REMEMBERME"),
            lifetime=int(os.getenv("REMEMBER_ME_LIFETIME", "31536000")),
        )

    def get_redis_config(self) -> RedisConfig:
        """Get Redis configuration from environment variables."""
        # Port might be in tcp://host:port format from K8s service links
        redis_port_env = os.getenv("REDIS_PORT", "6379")
        if redis_port_env.startswith("tcp://"):
            redis_port = int(redis_port_env.split(":")[-1])
        else:
            redis_port = int(redis_port_env)

        return RedisConfig(
            host=os.getenv("REDIS_HOST", "localhost"),
            port=redis_port,
            db=int(os.getenv("REDIS_DB", "0")),
            password=os.getenv("REDIS_PASSWORD"),
        )

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        return APIConfig(
            port=int(os.getenv("API_PORT", "8080")),
            host=os.getenv("API_HOST", "0.0.0.0"),
            debug=_flag("API_DEBUG", "false"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
