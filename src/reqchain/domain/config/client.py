"""HTTP client configuration model."""

from pydantic import BaseModel, Field


class ClientConfig(BaseModel):
    """Configuration for the HTTP client and its connection pool.

    Attributes:
        timeout: Default per-request timeout in seconds, covering all retries
        pool_connections: Number of per-host connection pools to cache
        pool_maxsize: Maximum connections kept per pool
        pool_block: Whether to block when a pool has no free connection
    """

    timeout: float = Field(30.0, gt=0.0)
    pool_connections: int = Field(10, gt=0)
    pool_maxsize: int = Field(10, gt=0)
    pool_block: bool = False
