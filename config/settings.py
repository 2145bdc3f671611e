"""
Preflight Configuration Settings
"""
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Storage (one JSON document per pilot)
    pilots_path: Path = Field(
        default=Path("./pilots"),
        alias="PREFLIGHT_PILOTS_PATH",
        description="Directory holding one JSON record per pilot"
    )

    # Server
    port: int = Field(default=8000, alias="PREFLIGHT_PORT")
    host: str = Field(default="0.0.0.0", alias="PREFLIGHT_HOST")

    cors_origins_raw: str = Field(
        default="*",
        alias="PREFLIGHT_CORS_ORIGINS",
        description="Allowed CORS origins (comma-separated)"
    )

    # API Keys (no prefix - standard env var names)
    anthropic_api_key: str = Field(default="", alias="ANTHROPIC_API_KEY")
    aviation_api_key: str = Field(default="", alias="AVIATION_API_KEY")
    you_api_key: str = Field(default="", alias="YOU_API_KEY")

    # Language model used for readiness scoring and emotion inference
    claude_model: str = Field(
        default="claude-sonnet-4-5-20250929",
        alias="PREFLIGHT_CLAUDE_MODEL"
    )

    # Third-party endpoints
    aviation_api_url: str = Field(
        default="http://api.aviationstack.com/v1",
        alias="AVIATION_API_URL"
    )
    you_api_url: str = Field(
        default="https://api.ydc-index.io/v1",
        alias="YOU_API_URL"
    )
    open_meteo_forecast_url: str = Field(
        default="https://api.open-meteo.com/v1/forecast",
        alias="OPEN_METEO_FORECAST_URL"
    )
    open_meteo_geocoding_url: str = Field(
        default="https://geocoding-api.open-meteo.com/v1/search",
        alias="OPEN_METEO_GEOCODING_URL"
    )

    # Single-shot outbound calls; no retries
    http_timeout: float = Field(default=30.0, alias="PREFLIGHT_HTTP_TIMEOUT")

    @property
    def cors_allowed_origins(self) -> list[str]:
        """Parse comma-separated origins into list."""
        if not self.cors_origins_raw:
            return ["*"]
        return [x.strip() for x in self.cors_origins_raw.split(",") if x.strip()]

    @property
    def llm_enabled(self) -> bool:
        """Check if the Anthropic API is configured."""
        return bool(self.anthropic_api_key and self.anthropic_api_key.strip())


settings = Settings()
