"""Defines common Value Objects used across different domain contexts.

These objects represent simple values like API paths, query parameters
and retry policies, ensuring consistency and type safety.
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping, NewType, Optional, Tuple, Union

# === Request Context ===

ApiPath = NewType("ApiPath", str)        # Path relative to the configured base URL
ToolName = NewType("ToolName", str)      # Name of an MCP tool, e.g. 'mars_get'

# A single query value. bool is listed first because it is a subclass of int.
QueryScalar = Union[bool, int, float, str]
QueryValue = Union[QueryScalar, List[Optional[QueryScalar]], Tuple[Optional[QueryScalar], ...], None]
QueryParams = Mapping[str, QueryValue]

# Flattened (key, value) pairs, in the order they appear in the URL
QueryPairs = List[Tuple[str, str]]

Headers = Dict[str, str]


# === Resilience Context ===

@dataclass(frozen=True)
class RetryPolicy:
    """Value Object representing retry backoff configuration.

    Attributes:
        max_retries: Retries allowed after the first attempt (0 disables retrying).
        base_delay_s: Delay before the first retry, doubled on every further retry.
        max_delay_s: Upper bound for the exponential part of the delay.
    """
    max_retries: int = 2
    base_delay_s: float = 0.25
    max_delay_s: Optional[float] = 5.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be zero or greater.")
        if self.base_delay_s < 0:
            raise ValueError("base_delay_s must be zero or greater.")
        if self.max_delay_s is not None and self.max_delay_s < 0:
            raise ValueError("max_delay_s must be zero or greater.")
