"""Retry configuration model."""

from typing import List, Optional

from pydantic import BaseModel, field_validator


class RetryConfig(BaseModel):
    """Configuration for the retry interceptor.

    The number of retries and the backoff schedule are fixed; only the
    retryable status codes can be chosen.

    Attributes:
        enabled: Whether the retry interceptor is installed
        status_codes: Status codes to retry on (None = built-in transient-failure set)
    """

    enabled: bool = True
    status_codes: Optional[List[int]] = None

    @field_validator("status_codes")
    @classmethod
    def check_status_codes(cls, value: Optional[List[int]]) -> Optional[List[int]]:
        if value is None:
            return value
        if not value:
            raise ValueError("status_codes must not be empty (use null for defaults)")
        for code in value:
            if not 100 <= code <= 599:
                raise ValueError(f"invalid HTTP status code: {code}")
        return list(dict.fromkeys(value))
