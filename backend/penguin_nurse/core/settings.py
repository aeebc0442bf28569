import json
import os
from datetime import time
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator


class DatabaseConfig(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./penguin_nurse.db")
    echo: bool = False

    @field_validator("url")
    def _async_driver(cls, v: str) -> str:
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql+asyncpg://", 1)
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)


class SecurityConfig(BaseModel):
    session_cookie_name: str = Field(default="penguin_nurse_session", min_length=1)
    session_days: int = Field(default=7, ge=1, le=365)
    cookie_secure: bool = False
    cors_origins: list[str] = Field(default_factory=list)
    initial_admin_username: str = Field(default="admin", min_length=1)
    initial_admin_password: Optional[str] = None
    login_attempts: int = Field(default=5, ge=1)
    login_window_seconds: int = Field(default=60, ge=1)


class OidcConfig(BaseModel):
    discovery_url: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    auth_scope: str = Field(default="openid email profile")
    base_url: Optional[str] = None
    refresh_minutes: int = Field(default=10, ge=1)
    retry_seconds: int = Field(default=60, ge=1)
    timeout_seconds: int = Field(default=10, ge=1)

    @property
    def enabled(self) -> bool:
        return bool(self.discovery_url)

    @property
    def redirect_uri(self) -> str:
        return f"{(self.base_url or '').rstrip('/')}/openid_connect_redirect_uri"

    @model_validator(mode="after")
    def _require_client(self) -> "OidcConfig":
        if self.enabled:
            missing = [
                name for name in ("client_id", "client_secret", "base_url") if not getattr(self, name)
            ]
            if missing:
                raise ValueError(f"OIDC enabled but missing: {', '.join(missing)}")
        return self


class TimelineConfig(BaseModel):
    timezone: str = Field(default="UTC")
    day_start: time = Field(default=time(7, 0))

    @field_validator("timezone")
    def _known_zone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
            raise ValueError(f"Unknown timezone {v!r}") from exc
        return v

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


class Settings(BaseModel):
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    oidc: OidcConfig = Field(default_factory=OidcConfig)
    timeline: TimelineConfig = Field(default_factory=TimelineConfig)

    model_config = ConfigDict(arbitrary_types_allowed=True)


SECTIONS = ("database", "server", "security", "oidc", "timeline")

# env var -> (section, field)
ENV_MAP: dict[str, tuple[str, str]] = {
    "DATABASE_URL": ("database", "url"),
    "DATABASE_ECHO": ("database", "echo"),
    "SERVER_HOST": ("server", "host"),
    "SERVER_PORT": ("server", "port"),
    "SESSION_COOKIE_NAME": ("security", "session_cookie_name"),
    "SESSION_DAYS": ("security", "session_days"),
    "COOKIE_SECURE": ("security", "cookie_secure"),
    "INITIAL_ADMIN_USERNAME": ("security", "initial_admin_username"),
    "INITIAL_ADMIN_PASSWORD": ("security", "initial_admin_password"),
    "OIDC_DISCOVERY_URL": ("oidc", "discovery_url"),
    "OIDC_CLIENT_ID": ("oidc", "client_id"),
    "OIDC_CLIENT_SECRET": ("oidc", "client_secret"),
    "OIDC_AUTH_SCOPE": ("oidc", "auth_scope"),
    "BASE_URL": ("oidc", "base_url"),
    "TIMEZONE": ("timeline", "timezone"),
    "DAY_START": ("timeline", "day_start"),
}


def _config_path() -> Path:
    return Path(os.environ.get("CONFIG_PATH", "config/config.json"))


def _load_file_config(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    except json.JSONDecodeError as exc:
        raise RuntimeError(f"Invalid JSON configuration at {path}") from exc


def _load_env() -> dict[str, Any]:
    env_config: dict[str, Any] = {}

    for key, (section, field) in ENV_MAP.items():
        value = os.environ.get(key)
        if value:
            env_config.setdefault(section, {})[field] = value

    cors_origins = os.environ.get("CORS_ORIGINS")
    if cors_origins:
        env_config.setdefault("security", {})["cors_origins"] = [
            origin.strip() for origin in cors_origins.split(",") if origin.strip()
        ]

    return env_config


def merge_settings(env_config: dict[str, Any], file_config: dict[str, Any]) -> dict[str, Any]:
    return {
        section: {**file_config.get(section, {}), **env_config.get(section, {})}
        for section in SECTIONS
    }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    env_config = _load_env()
    file_config = _load_file_config(_config_path())
    merged = merge_settings(env_config=env_config, file_config=file_config)
    try:
        return Settings.model_validate(merged)
    except ValidationError as exc:
        raise RuntimeError(f"Configuration error: {exc}") from exc


__all__ = ["Settings", "get_settings"]
