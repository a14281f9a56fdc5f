"""Domain Events related to MARS API calls and resilience.

Examples include events for when calls are deferred, retried, fail, or succeed.
"""

from dataclasses import dataclass, field
import time
from typing import Optional

# Base Event Class
@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass

# --- Specific API Events ---

@dataclass
class ApiCallInitiated(DomainEvent):
    """Event triggered when a single HTTP attempt is about to be made."""
    endpoint: str
    url: str
    attempt: int
    timestamp: float = field(default_factory=time.time)

@dataclass
class ApiCallSucceeded(DomainEvent):
    """Event triggered when a logical call succeeds."""
    endpoint: str
    status_code: int
    latency_ms: float
    attempts: int
    timestamp: float = field(default_factory=time.time)

@dataclass
class ApiCallFailed(DomainEvent):
    """Event triggered when a logical call fails definitively (after retries)."""
    endpoint: str
    error_kind: str
    error_message: str
    attempts: int
    http_status: Optional[int] = None
    timestamp: float = field(default_factory=time.time)

@dataclass
class ApiCallDeferred(DomainEvent):
    """Event triggered when a call must queue for a concurrency slot."""
    endpoint: str
    in_use: int
    waiting: int
    timestamp: float = field(default_factory=time.time)

@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when a retry is scheduled for a failed attempt."""
    endpoint: str
    attempt_number: int
    error_kind: str
    delay_seconds: float
    http_status: Optional[int] = None
    timestamp: float = field(default_factory=time.time)
