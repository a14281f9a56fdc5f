"""Immutable configuration for the MARS client."""

from dataclasses import dataclass
from typing import Optional

from marsmcp.domain.models.common import RetryPolicy
from marsmcp.infrastructure.mars.url import validate_base_url

DEFAULT_BASE_URL = "https://marsapi.ams.usda.gov/services/v1.2/"
AUTH_SCHEMES = ("basic", "bearer")


@dataclass(frozen=True)
class MarsConfig:
    """Client settings, validated at construction and never mutated afterwards."""
    base_url: str = DEFAULT_BASE_URL
    api_key: Optional[str] = None
    timeout_s: float = 15.0
    max_retries: int = 2
    retry_base_delay_s: float = 0.25
    retry_max_delay_s: Optional[float] = 5.0
    concurrency: int = 4
    auth_scheme: str = "basic"

    def __post_init__(self) -> None:
        validate_base_url(self.base_url)
        if self.timeout_s <= 0:
            raise ValueError("timeout_s must be greater than zero.")
        if self.concurrency < 1:
            raise ValueError("concurrency must be at least 1.")
        if self.auth_scheme not in AUTH_SCHEMES:
            raise ValueError(f"auth_scheme must be one of {AUTH_SCHEMES}, got {self.auth_scheme!r}.")
        # Delegates max_retries / delay validation
        self.retry_policy

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_retries=self.max_retries,
            base_delay_s=self.retry_base_delay_s,
            max_delay_s=self.retry_max_delay_s,
        )

    def __repr__(self) -> str:
        key = "***" if self.api_key else None
        return (
            f"MarsConfig(base_url={self.base_url!r}, api_key={key!r}, timeout_s={self.timeout_s}, "
            f"max_retries={self.max_retries}, retry_base_delay_s={self.retry_base_delay_s}, "
            f"retry_max_delay_s={self.retry_max_delay_s}, concurrency={self.concurrency}, "
            f"auth_scheme={self.auth_scheme!r})"
        )
