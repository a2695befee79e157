"""
Tests for configuration validation
"""
import pytest
from pydantic import ValidationError
from app.core.config import Settings


def _prod_settings(**overrides):
    values = dict(
        DATABASE_URL="postgresql://test",
        JWT_SECRET_KEY="a" * 32,
        APP_ENV="prod",
        ALLOWED_ORIGINS="https://example.com",
        CRON_SECRET="cron-secret",
    )
    values.update(overrides)
    return Settings(**values)


def test_prod_settings_valid():
    _prod_settings().validate_production()


def test_prod_settings_rejects_wildcard_origins():
    with pytest.raises(ValueError, match="ALLOWED_ORIGINS"):
        _prod_settings(ALLOWED_ORIGINS="*").validate_production()


def test_prod_settings_rejects_short_jwt_secret():
    with pytest.raises(ValueError, match="JWT_SECRET_KEY"):
        _prod_settings(JWT_SECRET_KEY="short").validate_production()


def test_prod_settings_requires_cron_secret():
    with pytest.raises(ValueError, match="CRON_SECRET"):
        _prod_settings(CRON_SECRET=None).validate_production()


def test_local_settings_allows_wildcard_origins():
    settings = Settings(
        DATABASE_URL="postgresql://test",
        JWT_SECRET_KEY="test-key",
        APP_ENV="local",
        ALLOWED_ORIGINS="*"
    )

    settings.validate_production()
    assert settings.get_allowed_origins_list() == ["*"]


def test_get_allowed_origins_list():
    settings = Settings(
        DATABASE_URL="postgresql://test",
        JWT_SECRET_KEY="test-key",
        ALLOWED_ORIGINS="https://example.com, https://app.example.com,"
    )

    assert settings.get_allowed_origins_list() == ["https://example.com", "https://app.example.com"]


def test_invalid_app_env_rejected():
    with pytest.raises(ValidationError):
        Settings(DATABASE_URL="postgresql://test", JWT_SECRET_KEY="k", APP_ENV="dev")


def test_non_positive_timeout_rejected():
    with pytest.raises(ValidationError):
        Settings(DATABASE_URL="postgresql://test", JWT_SECRET_KEY="k", GRAPH_TIMEOUT_SECONDS=0)


def test_integrations_disabled_without_credentials():
    settings = Settings(DATABASE_URL="postgresql://test", JWT_SECRET_KEY="k")

    assert settings.is_graph_configured() is False
    assert settings.is_email_configured() is False

    settings = Settings(
        DATABASE_URL="postgresql://test",
        JWT_SECRET_KEY="k",
        AZURE_TENANT_ID="t",
        AZURE_CLIENT_ID="c",
        AZURE_CLIENT_SECRET="s",
        SENDGRID_API_KEY="SG.key",
    )
    assert settings.is_graph_configured() is True
    assert settings.is_email_configured() is True
