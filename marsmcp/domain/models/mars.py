"""Domain models for MARS API interactions.

Includes the typed result of a successful call and the typed error raised
when a call fails, together with the error taxonomy.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .common import Headers


class ErrorKind(str, enum.Enum):
    """Classification of a failed upstream attempt."""
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    TRANSPORT = "transport"     # timeout / connection-level failure
    UNKNOWN = "unknown"         # unclassified status or unexpected exception

    @property
    def retryable(self) -> bool:
        return self in (ErrorKind.RATE_LIMITED, ErrorKind.SERVER_ERROR)


_STATUS_KINDS = {
    400: ErrorKind.BAD_REQUEST,
    401: ErrorKind.UNAUTHORIZED,
    403: ErrorKind.UNAUTHORIZED,
    404: ErrorKind.NOT_FOUND,
    429: ErrorKind.RATE_LIMITED,
    500: ErrorKind.SERVER_ERROR,
    502: ErrorKind.SERVER_ERROR,
    503: ErrorKind.SERVER_ERROR,
    504: ErrorKind.SERVER_ERROR,
}


def classify_status(status_code: int) -> ErrorKind:
    """Maps a non-2xx HTTP status code to an ErrorKind."""
    return _STATUS_KINDS.get(status_code, ErrorKind.UNKNOWN)


@dataclass
class MarsResponse:
    """Successful response from the MARS API."""
    data: Any
    status_code: int
    headers: Headers = field(default_factory=dict)


class MarsError(Exception):
    """Typed error raised for a failed MARS attempt.

    One instance is created per failed attempt. When a call exhausts its
    retries, the instance from the last attempt reaches the caller.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        http_status: Optional[int] = None,
        details: Any = None,
        url: Optional[str] = None,
        attempt: int = 0,
    ):
        self.kind = kind
        self.message = message
        self.http_status = http_status
        self.details = details
        self.url = url
        self.attempt = attempt
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        return self.kind.retryable

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form used in tool results."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "http_status": self.http_status,
            "details": self.details,
        }

    def __str__(self) -> str:
        status = f" (HTTP {self.http_status})" if self.http_status is not None else ""
        return f"[{self.kind.value}] {self.message}{status}"

    def __repr__(self) -> str:
        return (
            f"MarsError(kind={self.kind.value!r}, message={self.message!r}, "
            f"http_status={self.http_status!r}, attempt={self.attempt})"
        )
