"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file) once at
startup and are treated as immutable afterwards.
"""

from __future__ import annotations

from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str
    db_name: str = "auth-service"


class JWTSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    jwt_issuer: str = "auth-service"
    jwt_audience: str = "auth-service.api"
    token_ttl_seconds: int = 604800  # 7 days

    # RS256 keys (preferred)
    jwt_private_key: str = ""
    jwt_public_key: str = ""

    # HS256 fallback (used when RS256 keys are absent)
    jwt_secret: str = ""

    @property
    def use_rs256(self) -> bool:
        return bool(self.jwt_private_key and self.jwt_public_key)


class CookieSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    cookie_name: str = "token"
    # None means "derive from ENV" (see AppSettings)
    cookie_secure: Optional[bool] = None
    cookie_samesite: Optional[str] = None
    cookie_domain: Optional[str] = None


class OtpSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    otp_length: int = 6
    verify_otp_ttl_seconds: int = 600
    reset_otp_ttl_seconds: int = 900


class EmailSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    zepto_api_url: str = "https://api.zeptomail.in/v1.1/email"
    zepto_api_token: str = ""
    zepto_from_email: str = "noreply@example.com"
    zepto_from_name: str = "Auth Service"
    email_timeout_seconds: float = 5.0


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    # None means "derive from ENV": json in production, console otherwise
    log_format: Optional[str] = None


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    env: str = "development"
    app_url: str = "http://localhost:4000"
    app_name: str = "auth-service"

    # CORS — all origins, credentials allowed
    cors_origins: list[str] = ["*"]

    # Legacy mode: every error body is sent with HTTP 200
    uniform_status_codes: bool = False

    # OpenAPI docs URL (None disables the docs UI)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    jwt: Optional[JWTSettings] = None
    cookie: Optional[CookieSettings] = None
    otp: Optional[OtpSettings] = None
    email: Optional[EmailSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        if self.db is None:
            self.db = DatabaseSettings()
        if self.jwt is None:
            self.jwt = JWTSettings()
        if self.cookie is None:
            self.cookie = CookieSettings()
        if self.otp is None:
            self.otp = OtpSettings()
        if self.email is None:
            self.email = EmailSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()

        # Cross-site cookies need Secure + SameSite=None in production
        if self.cookie.cookie_secure is None:
            self.cookie.cookie_secure = self.is_production
        if self.cookie.cookie_samesite is None:
            self.cookie.cookie_samesite = "none" if self.is_production else "strict"
        if self.logging.log_format is None:
            self.logging.log_format = "json" if self.is_production else "console"

        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"
