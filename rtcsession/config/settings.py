from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

from rtcsession.config.constants import DEFAULT_DECRYPTION_RETRY_DELAY_SEC


class Settings(BaseSettings):
    # Redis
    REDIS_HOST: str = Field("redis")
    REDIS_PORT: int = Field(6379)
    REDIS_PASSWORD: str | None = Field(None)

    # Session transition fan-out
    SESSION_EVENTS_ENABLED: bool = Field(False)
    SESSION_EVENTS_STREAM: str = Field("stream:rtc:sessions")

    # Decryption
    DECRYPTION_RETRY_DELAY_SEC: float = Field(DEFAULT_DECRYPTION_RETRY_DELAY_SEC)

    # Metrics
    METRICS_ENABLED: bool = Field(False)
    METRICS_PORT: int = Field(8001)

    # App
    DEBUG: bool = Field(False)
    LOG_LEVEL: str = Field("INFO")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        env_file_encoding="utf-8"
    )


settings = Settings()
