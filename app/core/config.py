"""
Configuration management for Starterskalender Backend
"""
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import Optional, List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Required settings
    DATABASE_URL: str = Field(..., description="PostgreSQL database URL")
    JWT_SECRET_KEY: str = Field(..., description="JWT secret key for token signing")

    # Optional settings with defaults
    JWT_ALGORITHM: str = Field(default="HS256", description="JWT algorithm")
    JWT_EXPIRE_MINUTES: int = Field(default=720, description="JWT token expiration in minutes")

    APP_ENV: str = Field(default="local", description="Application environment: local, staging, prod")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level: DEBUG, INFO, WARNING, ERROR")

    # CORS settings
    ALLOWED_ORIGINS: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins. Use '*' for local only."
    )

    # Timezone used for "today", digest windows and ISO week numbers (DB stores UTC)
    TZ: str = Field(default="Europe/Brussels", description="Business timezone")

    # Version (can be git SHA or semver)
    VERSION: Optional[str] = Field(default=None, description="Application version (git SHA or semver)")

    # Shared secret for scheduled jobs (digest emails)
    CRON_SECRET: Optional[str] = Field(
        default=None,
        description="Bearer secret required by /cron endpoints"
    )

    # Public URL of the web frontend, used for links in emails
    APP_BASE_URL: str = Field(default="http://localhost:3000", description="Frontend base URL")

    # Initial admin bootstrap settings
    INITIAL_ADMIN_EMAIL: str = Field(
        default="admin@company.com",
        description="Email for initial admin user (used when no admin exists)"
    )
    INITIAL_ADMIN_PASSWORD: str = Field(
        default="Admin@12345",
        description="Password for initial admin user (used when no admin exists)"
    )

    # Outbound email (SendGrid v3 HTTP API)
    SENDGRID_API_KEY: Optional[str] = Field(default=None, description="SendGrid API key")
    SENDGRID_API_URL: str = Field(
        default="https://api.sendgrid.com/v3/mail/send",
        description="SendGrid send endpoint"
    )
    MAIL_FROM: str = Field(default="noreply@example.com", description="Sender address")
    MAIL_REPLY_TO: Optional[str] = Field(default=None, description="Reply-To address")
    EMAIL_TIMEOUT_SECONDS: float = Field(default=10.0, description="Timeout for email API calls")

    # Calendar API (Microsoft Graph, client credentials flow)
    AZURE_TENANT_ID: Optional[str] = Field(default=None, description="Azure AD tenant")
    AZURE_CLIENT_ID: Optional[str] = Field(default=None, description="Azure AD app client id")
    AZURE_CLIENT_SECRET: Optional[str] = Field(default=None, description="Azure AD app secret")
    GRAPH_API_URL: str = Field(default="https://graph.microsoft.com/v1.0", description="Graph base URL")
    GRAPH_TIMEOUT_SECONDS: float = Field(default=10.0, description="Timeout for calendar API calls")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    @field_validator("APP_ENV")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate APP_ENV"""
        allowed = ["local", "staging", "prod"]
        if v not in allowed:
            raise ValueError(f"APP_ENV must be one of {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate LOG_LEVEL"""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v.upper()

    @field_validator("GRAPH_TIMEOUT_SECONDS", "EMAIL_TIMEOUT_SECONDS")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Outbound calls must always have a bounded, positive timeout"""
        if v <= 0:
            raise ValueError("Timeouts must be greater than zero")
        return v

    def validate_production(self) -> None:
        """
        Validate settings for production environment

        Raises:
            ValueError: If production settings are invalid
        """
        if self.APP_ENV == "prod":
            # JWT_SECRET_KEY must be at least 32 characters in production
            if len(self.JWT_SECRET_KEY) < 32:
                raise ValueError(
                    "JWT_SECRET_KEY must be at least 32 characters in production environment"
                )

            # ALLOWED_ORIGINS must not be wildcard in production
            if self.ALLOWED_ORIGINS == "*" or not self.ALLOWED_ORIGINS:
                raise ValueError(
                    "ALLOWED_ORIGINS must be explicitly set (not '*') in production environment"
                )

            # Cron endpoints may not be public in production
            if not self.CRON_SECRET:
                raise ValueError(
                    "CRON_SECRET must be set in production environment"
                )

    def get_allowed_origins_list(self) -> List[str]:
        """
        Get list of allowed CORS origins

        Returns:
            List of allowed origins (or ['*'] for local)
        """
        if self.ALLOWED_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    def is_graph_configured(self) -> bool:
        """True when all calendar API credentials are present"""
        return bool(self.AZURE_TENANT_ID and self.AZURE_CLIENT_ID and self.AZURE_CLIENT_SECRET)

    def is_email_configured(self) -> bool:
        """True when outbound email can be sent"""
        return bool(self.SENDGRID_API_KEY)


# Create settings instance
settings = Settings()

# Validate production settings if in prod
if settings.APP_ENV == "prod":
    settings.validate_production()
