"""Configuration management for s3-probe."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    log_level: str = "INFO"
    otel_enabled: bool = False
    otel_service_name: str = "s3-probe"
    http_timeout: float = 60.0
    http_max_pool_size: int = 10
    probe_filename: str = "test_file.txt"

    model_config = {
        "env_prefix": "S3_PROBE_",
        "case_sensitive": False,
    }


settings = Settings()
