"""Interface for market data sources.

Defines the contract the tool layer depends on: a single typed fetch of
a path relative to the upstream base URL.
"""

import abc
from typing import Optional

from marsmcp.domain.models.common import ApiPath, QueryParams
from marsmcp.domain.models.mars import MarsResponse


class MarketDataSource(abc.ABC):
    """Abstract Base Class for market report retrieval."""

    @property
    @abc.abstractmethod
    def base_url(self) -> str:
        """The upstream base URL requests are resolved against."""
        pass

    @abc.abstractmethod
    async def fetch(self, path: ApiPath, query: Optional[QueryParams] = None) -> MarsResponse:
        """Fetches a path with optional query parameters asynchronously.

        Args:
            path: API path relative to the base URL (e.g., '/reports').
            query: Query parameters; None values are omitted and list values
                become repeated keys.

        Returns:
            A MarsResponse with the decoded JSON payload and status code.

        Raises:
            MarsError: If the call fails after any retries.
        """
        pass
