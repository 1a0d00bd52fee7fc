from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from listing_sync.core.exceptions import ConfigurationError

REQUIRED_SYNC_SETTINGS = (
    "APPFOLIO_CLIENT_ID",
    "APPFOLIO_CLIENT_SECRET",
    "APPFOLIO_DOMAIN",
    "HUBSPOT_API_KEY",
    "HUBDB_TABLE_ID",
    "HUBDB_TABLE_ID_PUBLIC",
)


class Settings(BaseSettings):
    # Environment mode: dev or prod
    ENV: Literal["dev", "prod"] = "dev"

    # Source provider (AppFolio reporting API)
    APPFOLIO_CLIENT_ID: str | None = None
    APPFOLIO_CLIENT_SECRET: str | None = None
    APPFOLIO_DOMAIN: str | None = None
    APPFOLIO_REPORT_PATH: str = "/api/v2/reports/unit_directory.json"

    # Destination store (HubDB)
    HUBSPOT_API_KEY: str | None = None
    HUBDB_BASE_URL: str = "https://api.hubapi.com/cms/v3/hubdb"
    HUBDB_TABLE_ID: str | None = None
    HUBDB_TABLE_ID_PUBLIC: str | None = None
    PUBLISH_INTERNAL: bool = True
    PUBLISH_PUBLIC: bool = True
    PHOTO_SLOT_COUNT: int = 10

    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    SLACK_WEBHOOK_URL: str | None = None

    # Background schedule (HTTP service only)
    SYNC_SCHEDULE_ENABLED: bool = False
    SYNC_INTERVAL_SECONDS: int = 60 * 60

    # Docs Configuration
    DOCS_ENABLED: bool | None = None  # Override docs setting (None = auto based on ENV)

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",  # ignore unrelated keys in local .env
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENV == "prod"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENV == "dev"

    @property
    def debug_enabled(self) -> bool:
        """Debug mode is only enabled in development."""
        return self.is_development

    @property
    def docs_enabled(self) -> bool:
        """Swagger/ReDoc docs enabled based on environment or override."""
        if self.DOCS_ENABLED is not None:
            return self.DOCS_ENABLED
        return self.is_development

    @property
    def appfolio_url(self) -> str:
        return f"https://{self.APPFOLIO_DOMAIN}.appfolio.com{self.APPFOLIO_REPORT_PATH}"

    def missing_sync_settings(self) -> List[str]:
        """Names of required sync inputs that are absent or blank."""
        missing = []
        for name in REQUIRED_SYNC_SETTINGS:
            value = getattr(self, name)
            if value is None or not str(value).strip():
                missing.append(name)
        return missing

    def require_sync_settings(self) -> None:
        missing = self.missing_sync_settings()
        if missing:
            raise ConfigurationError(
                "Missing required environment variables",
                context={"missing": ", ".join(missing)},
            )


settings = Settings()
