"""Unit tests for AppSettings and sub-configs."""

import pytest

from config import (
    AppSettings,
    CookieSettings,
    DatabaseSettings,
    JWTSettings,
    OtpSettings,
)


@pytest.fixture
def with_mongo(monkeypatch):
    """Set the required MONGODB_URI so AppSettings can be instantiated."""
    monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
    for var in (
        "ENV",
        "COOKIE_SECURE",
        "COOKIE_SAMESITE",
        "LOG_FORMAT",
        "UNIFORM_STATUS_CODES",
    ):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


class TestDatabaseSettings:
    def test_loads_mongodb_uri(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://db:27017/")
        assert DatabaseSettings().mongodb_uri == "mongodb://db:27017/"

    def test_default_db_name(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
        monkeypatch.delenv("DB_NAME", raising=False)
        assert DatabaseSettings().db_name == "auth-service"

    def test_missing_mongodb_uri_raises(self, monkeypatch):
        monkeypatch.delenv("MONGODB_URI", raising=False)
        with pytest.raises(Exception):
            DatabaseSettings()


class TestJWTSettings:
    def test_defaults(self, monkeypatch):
        for var in (
            "JWT_ISSUER",
            "JWT_AUDIENCE",
            "TOKEN_TTL_SECONDS",
            "JWT_PRIVATE_KEY",
            "JWT_PUBLIC_KEY",
            "JWT_SECRET",
        ):
            monkeypatch.delenv(var, raising=False)
        s = JWTSettings()
        assert s.token_ttl_seconds == 7 * 24 * 3600
        assert s.jwt_secret == ""
        assert s.use_rs256 is False

    def test_secret_from_env(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "s3cret")
        assert JWTSettings().jwt_secret == "s3cret"


@pytest.mark.parametrize(
    "private_key, public_key, expected",
    [("private", "public", True), ("private", None, False), (None, None, False)],
    ids=["keys_present", "public_missing", "keys_absent"],
)
def test_jwt_use_rs256(monkeypatch, private_key, public_key, expected):
    for var, value in (("JWT_PRIVATE_KEY", private_key), ("JWT_PUBLIC_KEY", public_key)):
        if value:
            monkeypatch.setenv(var, value)
        else:
            monkeypatch.delenv(var, raising=False)
    assert JWTSettings().use_rs256 is expected


class TestOtpSettings:
    def test_defaults(self, monkeypatch):
        for var in ("OTP_LENGTH", "VERIFY_OTP_TTL_SECONDS", "RESET_OTP_TTL_SECONDS"):
            monkeypatch.delenv(var, raising=False)
        s = OtpSettings()
        assert s.otp_length == 6
        assert s.verify_otp_ttl_seconds == 600
        assert s.reset_otp_ttl_seconds == 900

    def test_override(self, monkeypatch):
        monkeypatch.setenv("VERIFY_OTP_TTL_SECONDS", "60")
        assert OtpSettings().verify_otp_ttl_seconds == 60


class TestAppSettings:
    def test_sub_configs_populated(self, with_mongo):
        s = AppSettings()
        assert s.db is not None
        assert s.jwt is not None
        assert s.cookie is not None
        assert s.otp is not None
        assert s.email is not None

    @pytest.mark.parametrize(
        "env, secure, samesite",
        [("production", True, "none"), ("development", False, "strict")],
        ids=["production", "development"],
    )
    def test_cookie_policy_follows_env(self, with_mongo, env, secure, samesite):
        with_mongo.setenv("ENV", env)
        s = AppSettings()
        assert s.is_production is (env == "production")
        assert s.cookie.cookie_secure is secure
        assert s.cookie.cookie_samesite == samesite

    @pytest.mark.parametrize(
        "env, log_format", [("production", "json"), ("development", "console")]
    )
    def test_log_format_follows_env(self, with_mongo, env, log_format):
        with_mongo.setenv("ENV", env)
        assert AppSettings().logging.log_format == log_format

    def test_explicit_log_format_wins(self, with_mongo):
        with_mongo.setenv("ENV", "production")
        with_mongo.setenv("LOG_FORMAT", "console")
        assert AppSettings().logging.log_format == "console"

    def test_explicit_cookie_settings_win(self, with_mongo):
        with_mongo.setenv("ENV", "production")
        s = AppSettings(cookie=CookieSettings(cookie_secure=False, cookie_samesite="lax"))
        assert s.cookie.cookie_secure is False
        assert s.cookie.cookie_samesite == "lax"

    def test_uniform_status_codes_default_off(self, with_mongo):
        assert AppSettings().uniform_status_codes is False
