"""Main application configuration model."""

from pydantic import BaseModel, ConfigDict, Field

from reqchain.domain.config.client import ClientConfig
from reqchain.domain.config.retry import RetryConfig


class AppConfig(BaseModel):
    """Main application configuration.

    Root model aggregating all configuration sections. Validation is
    performed at load time to fail fast on configuration errors.

    Attributes:
        client: HTTP client and connection pool configuration
        retry: Retry interceptor configuration
    """

    client: ClientConfig = Field(default_factory=ClientConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
        json_schema_extra={
            "example": {
                "client": {
                    "timeout": 30.0,
                    "pool_connections": 10,
                    "pool_maxsize": 10,
                    "pool_block": False,
                },
                "retry": {
                    "enabled": True,
                    "status_codes": [429, 503, 504],
                },
            }
        },
    )
