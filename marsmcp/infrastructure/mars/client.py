"""Concrete implementation of the MarketDataSource interface over httpx.

Turns a logical request (path + query) into a bounded, retried HTTP GET:
one concurrency slot per logical call, a hard timeout per attempt, and a
single classification of every failed attempt into a MarsError.
"""

import asyncio
import base64
import logging
import time
from typing import Any, Callable, Optional

import httpx

from marsmcp.domain.events.api_events import (
    ApiCallDeferred, ApiCallFailed, ApiCallInitiated, ApiCallSucceeded,
    DomainEvent, RetryScheduled,
)
from marsmcp.domain.interfaces.market_data import MarketDataSource
from marsmcp.domain.models.common import ApiPath, Headers, QueryParams
from marsmcp.domain.models.mars import ErrorKind, MarsError, MarsResponse, classify_status
from marsmcp.infrastructure.mars.config import MarsConfig
from marsmcp.infrastructure.mars.url import build_mars_url
from marsmcp.infrastructure.resilience.api_retry import ApiRetryService
from marsmcp.infrastructure.resilience.concurrency_limiter import ConcurrencyLimiter

logger = logging.getLogger(__name__)

EventSink = Callable[[DomainEvent], None]

USER_AGENT = "marsmcp/0.1"


def _log_event(event: DomainEvent) -> None:
    logger.debug(f"EVENT: {event}")


def should_retry(error: Exception) -> bool:
    """Retry only rate limiting and server errors."""
    return isinstance(error, MarsError) and error.retryable


def _read_error_body(response: httpx.Response) -> Any:
    """JSON body if it parses, else raw text (None when empty)."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class MarsClient(MarketDataSource):
    """Resilient async client for the MARS API."""

    def __init__(
        self,
        config: MarsConfig,
        *,
        limiter: Optional[ConcurrencyLimiter] = None,
        retry_service: Optional[ApiRetryService] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        event_sink: Optional[EventSink] = None,
    ):
        """Initializes the client.

        Args:
            config: Immutable client settings.
            limiter: Shared limiter; a private one sized by config.concurrency if None.
            retry_service: Retry driver; a default one if None.
            transport: httpx transport, e.g. httpx.MockTransport in tests.
            event_sink: Receives domain events; logs them at debug if None.
        """
        self._config = config
        self.limiter = limiter or ConcurrencyLimiter(config.concurrency)
        self.retry_service = retry_service or ApiRetryService()
        self._emit = event_sink or _log_event
        self._http = httpx.AsyncClient(
            transport=transport,
            timeout=config.timeout_s,
            headers={"Accept": "application/json", "User-Agent": USER_AGENT},
        )
        self._auth_headers = self._build_auth_headers()
        logger.info(
            f"MarsClient initialized: base_url={config.base_url}, concurrency={self.limiter.capacity}, "
            f"max_retries={config.max_retries}, timeout={config.timeout_s}s"
        )

    @property
    def config(self) -> MarsConfig:
        return self._config

    @property
    def base_url(self) -> str:
        return self._config.base_url

    def _build_auth_headers(self) -> Headers:
        if not self._config.api_key:
            return {}
        if self._config.auth_scheme == "bearer":
            return {"Authorization": f"Bearer {self._config.api_key}"}
        # MARS uses HTTP Basic with the API key as username and an empty password
        token = base64.b64encode(f"{self._config.api_key}:".encode("utf-8")).decode("ascii")
        return {"Authorization": f"Basic {token}"}

    async def fetch(self, path: ApiPath, query: Optional[QueryParams] = None) -> MarsResponse:
        """Fetches ``path`` and returns the decoded JSON payload.

        The concurrency slot is held for the whole call, retries included.

        Raises:
            MarsError: The last attempt's error when the call does not succeed.
        """
        url = build_mars_url(self._config.base_url, path, query)
        endpoint = "/" + path.lstrip("/")

        if self.limiter.would_block():
            self._emit(ApiCallDeferred(endpoint=endpoint, in_use=self.limiter.in_use, waiting=self.limiter.waiting))

        async with self.limiter.slot():
            start_time = time.perf_counter()
            attempts = 0

            async def attempt(index: int) -> MarsResponse:
                nonlocal attempts
                attempts = index + 1
                self._emit(ApiCallInitiated(endpoint=endpoint, url=url, attempt=index))
                return await self._attempt(url, index)

            def on_retry(index: int, error: Exception, delay: float) -> None:
                self._emit(RetryScheduled(
                    endpoint=endpoint,
                    attempt_number=index + 1,
                    error_kind=getattr(error, "kind", ErrorKind.UNKNOWN).value,
                    delay_seconds=delay,
                    http_status=getattr(error, "http_status", None),
                ))

            try:
                response = await self.retry_service.execute_with_retry(
                    attempt,
                    self._config.retry_policy,
                    should_retry,
                    on_retry=on_retry,
                )
            except MarsError as e:
                logger.error(f"MARS request failed after {attempts} attempt(s): {e} url={url}")
                self._emit(ApiCallFailed(
                    endpoint=endpoint,
                    error_kind=e.kind.value,
                    error_message=e.message,
                    attempts=attempts,
                    http_status=e.http_status,
                ))
                raise

            latency_ms = (time.perf_counter() - start_time) * 1000
            self._emit(ApiCallSucceeded(
                endpoint=endpoint,
                status_code=response.status_code,
                latency_ms=latency_ms,
                attempts=attempts,
            ))
            return response

    async def _attempt(self, url: str, attempt: int) -> MarsResponse:
        """Performs one GET and classifies its outcome exactly once."""
        try:
            response = await asyncio.wait_for(
                self._http.get(url, headers=self._auth_headers),
                timeout=self._config.timeout_s,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise self._failed(
                MarsError(ErrorKind.TRANSPORT, f"Request timed out after {self._config.timeout_s}s", url=url, attempt=attempt),
            ) from e
        except httpx.TransportError as e:
            raise self._failed(
                MarsError(ErrorKind.TRANSPORT, f"Connection failed: {type(e).__name__}: {e}", url=url, attempt=attempt),
            ) from e
        except Exception as e:
            raise self._failed(
                MarsError(ErrorKind.UNKNOWN, f"Unexpected error: {type(e).__name__}: {e}", url=url, attempt=attempt),
            ) from e

        if not response.is_success:
            raise self._failed(MarsError(
                classify_status(response.status_code),
                "MARS request failed",
                http_status=response.status_code,
                details=_read_error_body(response),
                url=url,
                attempt=attempt,
            ))

        if not response.content:
            data = None
        else:
            try:
                data = response.json()
            except ValueError as e:
                raise self._failed(MarsError(
                    ErrorKind.UNKNOWN,
                    "Response body is not valid JSON",
                    http_status=response.status_code,
                    details=response.text,
                    url=url,
                    attempt=attempt,
                )) from e

        return MarsResponse(data=data, status_code=response.status_code, headers=dict(response.headers))

    def _failed(self, error: MarsError) -> MarsError:
        logger.warning(
            f"MARS attempt {error.attempt + 1} failed: kind={error.kind.value} "
            f"status={error.http_status} url={error.url}"
        )
        return error

    async def aclose(self) -> None:
        """Closes the underlying HTTP connection pool."""
        await self._http.aclose()

    async def __aenter__(self) -> "MarsClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
