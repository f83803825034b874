from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be configured via .env file or environment variables.
    """

    # Upstream analytics API
    API_BASE_URL: str | None = None
    UPSTREAM_TIMEOUT_SECONDS: float = 10.0
    SHOPIFY_API_VERSION: str = "2024-10"

    # Credential cookie sealing
    SECRET_KEY: str
    SESSION_MAX_AGE_SECONDS: int = 60 * 60 * 24 * 7

    # Application
    APP_NAME: str = "Insights Portal"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: str = ""
    CORS_ALLOW_CREDENTIALS: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    @property
    def api_base_url(self) -> str | None:
        """API_BASE_URL without trailing slashes, None when unset or blank"""
        if not self.API_BASE_URL or not self.API_BASE_URL.strip():
            return None
        return self.API_BASE_URL.strip().rstrip("/")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS from comma-separated string"""
        if not self.CORS_ORIGINS:
            return []
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings = Settings()
