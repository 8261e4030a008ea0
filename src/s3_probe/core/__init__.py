"""Core utilities and shared components for s3-probe."""

from .config import settings
from .exceptions import ConfigError, S3ProbeError
from .observability import get_logger, get_tracer

__all__ = ["settings", "ConfigError", "S3ProbeError", "get_logger", "get_tracer"]
