# Reasonable assumption: env vars / .env for local dev, injected by the host platform in prod.
from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TIMEOUT_MS = 30000


class EndpointConfig(BaseModel):
    """Upstream endpoint for one provider/service adapter."""

    model_config = ConfigDict(frozen=True)

    url: str = ""
    action_url: str = ""
    token: Optional[str] = None
    timeout: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0, description="Timeout in milliseconds")

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000


class AwsConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    region: Optional[str] = None
    ec2: EndpointConfig = EndpointConfig()
    rds: EndpointConfig = EndpointConfig()


class GcpConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    compute: EndpointConfig = EndpointConfig()


class Settings(BaseSettings):
    ENV: str = "development"
    APP_HOST: str = "0.0.0.0"
    APP_PORT: str = "8000"
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = ""
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Nested sections, e.g. AWS__RDS__URL=... or GCP__COMPUTE__TOKEN=...
    AWS: AwsConfig = AwsConfig()
    GCP: GcpConfig = GcpConfig()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        frozen=True,
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
