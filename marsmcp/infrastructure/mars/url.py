"""URL construction for MARS API requests.

Pure functions: no state, no I/O. Query strings are encoded with
``urllib.parse.urlencode`` so the output is stable byte for byte
(space becomes ``+``, ``=`` becomes ``%3D``).
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode, urlsplit

from marsmcp.domain.models.common import QueryPairs, QueryParams, QueryScalar


def _format_value(value: QueryScalar) -> str:
    # Upstream expects lowercase JSON-style booleans
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def validate_base_url(base_url: str) -> str:
    """Returns base_url unchanged, or raises ValueError if it is not absolute http(s)."""
    parts = urlsplit(base_url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ValueError(f"Invalid base URL: {base_url!r}")
    return base_url


def query_pairs(params: Optional[QueryParams]) -> QueryPairs:
    """Flattens a parameter mapping into ordered (key, value) pairs.

    None values are dropped, list values become one pair per element in
    their original order. Keys are kept exactly as given.
    """
    pairs: QueryPairs = []
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            for item in value:
                if item is None:
                    continue
                pairs.append((key, _format_value(item)))
        else:
            pairs.append((key, _format_value(value)))
    return pairs


def build_mars_url(base_url: str, path: str, params: Optional[QueryParams] = None) -> str:
    """Joins base URL and path with exactly one slash and appends the query.

    Args:
        base_url: Absolute http(s) URL, with or without a trailing slash.
        path: Path relative to base_url, with or without a leading slash.
        params: Query parameters (see :func:`query_pairs`).

    Returns:
        The absolute URL string.

    Raises:
        ValueError: If base_url is not an absolute http(s) URL.
    """
    validate_base_url(base_url)
    url = f"{base_url.rstrip('/')}/{path.lstrip('/')}"
    query = urlencode(query_pairs(params))
    return f"{url}?{query}" if query else url


@dataclass
class ReportQuery:
    """Typed filters accepted by the MARS report endpoints."""
    q: Optional[str] = None
    sort: Optional[str] = None
    all_sections: bool = False
    corrections_only: bool = False
    any_changes_since: Optional[str] = None
    last_days: Optional[int] = None
    last_reports: Optional[int] = None
    ds_id: Optional[str] = None

    def to_params(self) -> QueryParams:
        """Returns upstream parameter names; unset filters are left out."""
        params = {}
        if self.q:
            params["q"] = self.q
        if self.sort:
            params["sort"] = self.sort
        if self.all_sections:
            params["allSections"] = True
        if self.corrections_only:
            params["correctionsOnly"] = True
        if self.any_changes_since:
            params["anyChangesSince"] = self.any_changes_since
        if self.last_days is not None:
            params["lastDays"] = self.last_days
        if self.last_reports is not None:
            params["lastReports"] = self.last_reports
        if self.ds_id:
            params["dsId"] = self.ds_id
        return params


def build_query(query: ReportQuery) -> str:
    """Renders report filters as a query string, '?'-prefixed or empty."""
    encoded = urlencode(query_pairs(query.to_params()))
    return f"?{encoded}" if encoded else ""
