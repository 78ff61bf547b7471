from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Tuple

import requests

from paperboy.collect.http_client import HttpClient
from paperboy.core.errors import BucketFetchError, ConfigurationError
from paperboy.core.models import BucketSnapshot
from paperboy.core.utils import format_ts
from paperboy.infra.logging import get_unified_logger

CHARTBEAT_BASE = "https://api.chartbeat.com"
SNAPSHOTS_PATH = "/historical/dashapi/snapshots/"


class SnapshotClient(Protocol):
    def fetch_snapshot(self, timestamp: int) -> BucketSnapshot:
        ...


def _parse_titles(raw: Any) -> List[Tuple[str, str]]:
    if isinstance(raw, dict):
        items = list(raw.items())
    elif isinstance(raw, list):
        items = [tuple(x) for x in raw if isinstance(x, (list, tuple)) and len(x) == 2]
    else:
        return []
    return [(str(path), str(title)) for path, title in items if path is not None]


def _parse_active(raw: Any) -> List[Tuple[str, int]]:
    out: List[Tuple[str, int]] = []
    if not isinstance(raw, list):
        return out
    for entry in raw:
        if not isinstance(entry, dict) or entry.get("path") is None:
            continue
        try:
            total = int(entry.get("total") or 0)
        except (TypeError, ValueError):
            total = 0
        out.append((str(entry["path"]), max(0, total)))
    return out


def parse_snapshot(timestamp: int, payload: Dict[str, Any]) -> BucketSnapshot:
    """Turn a snapshots response body into a :class:`BucketSnapshot`.

    Missing ``titles`` gives an empty bucket; missing ``active`` leaves every
    title without visitors.
    """
    logger = get_unified_logger("collect", "snapshot")
    titles = payload.get("titles") if isinstance(payload, dict) else None
    if not titles:
        logger.warning(
            "No data collected for %s. Results may be skewed! Try older timestamps.",
            format_ts(timestamp),
        )
        return BucketSnapshot(timestamp=timestamp)
    return BucketSnapshot(
        timestamp=timestamp,
        titles=_parse_titles(titles),
        active=_parse_active(payload.get("active")),
    )


class ChartbeatClient:
    """Client for the Chartbeat historical snapshots endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        host: Optional[str],
        timeout: float = 10,
        http: Optional[HttpClient] = None,
        base_url: str = CHARTBEAT_BASE,
    ) -> None:
        if not api_key or not host:
            raise ConfigurationError("No Chartbeat API key or host specified")
        self.api_key = api_key
        self.host = host
        self.timeout = timeout
        self.http = http or HttpClient(timeout=timeout)
        self.url = base_url.rstrip("/") + SNAPSHOTS_PATH

    def fetch_snapshot(self, timestamp: int) -> BucketSnapshot:
        params = {"apikey": self.api_key, "host": self.host, "timestamp": int(timestamp)}
        try:
            resp = self.http.get(self.url, params=params, timeout=self.timeout)
            payload = resp.json()
        except requests.RequestException as e:
            raise BucketFetchError(timestamp, f"request failed: {e}", e) from e
        except ValueError as e:
            raise BucketFetchError(timestamp, f"invalid JSON body: {e}", e) from e
        if not isinstance(payload, dict):
            raise BucketFetchError(timestamp, "unexpected response shape")
        return parse_snapshot(timestamp, payload)
