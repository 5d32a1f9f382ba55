"""Configuration models with Pydantic validation."""

from reqchain.domain.config.app import AppConfig
from reqchain.domain.config.client import ClientConfig
from reqchain.domain.config.retry import RetryConfig

__all__ = [
    "AppConfig",
    "ClientConfig",
    "RetryConfig",
]
