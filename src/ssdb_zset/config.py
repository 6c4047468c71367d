from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    host: str = "127.0.0.1"
    port: int = Field(default=8888, gt=0, lt=65536)
    timeout: float = Field(default=5.0, gt=0)
    auth: str | None = None
    strict_scores: bool = True
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="SSDB_", env_file=".env", extra="ignore")

@lru_cache
def get_settings() -> Settings:
    return Settings()
