from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Backend inference
    api_url: str | None = None  # 미설정 시 배포 오류 (요청 단위 복구 대상 아님)
    api_timeout: float = 60.0

    # Inference client
    inference_provider: str = "http"  # "http"
    gateway_url: str = "http://localhost:8000"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Overlay
    stagger_delay_ms: int = 70
    label_offset: int = 24

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
