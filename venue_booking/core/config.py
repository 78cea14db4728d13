from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    BUSINESS_TIMEZONE: str = "America/Los_Angeles"

    CATALOG_BASE_URL: str = "http://localhost:8000/api"
    API_TOKEN: str | None = None
    HTTP_TIMEOUT_SECONDS: float = 10.0

    AVAILABILITY_HORIZON_DAYS: int = 90
    DEFAULT_SLOT_INTERVAL_MINUTES: int = 30

    ONLINE_CARD_PROCESSING_ENABLED: bool = True
    LOCATION_ID: int = 1
    SEND_RECEIPT_EMAIL: bool = True

    @property
    def uses_mock_adapters(self) -> bool:
        return self.ENV.lower() in {"dev", "local"}


settings = Settings()
