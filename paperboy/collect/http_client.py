"""Light-weight HTTP client shared by the snapshot and page fetchers."""
from __future__ import annotations

from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; Paperboy/1.0)",
    "Accept": "text/html,application/json;q=0.9,*/*;q=0.8",
}


class HttpClient:
    """Wrapper around :class:`requests.Session` with a mandatory timeout.

    ``retries`` defaults to 0: failed fetches are reported, not retried.
    """

    def __init__(
        self,
        timeout: float = 10,
        retries: int = 0,
        backoff_factor: float = 0.5,
        pool_size: int = 10,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.timeout = timeout
        retry = Retry(
            total=retries,
            backoff_factor=backoff_factor,
            status_forcelist=[500, 502, 503, 504],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry, pool_connections=pool_size, pool_maxsize=pool_size)
        self.session = requests.Session()
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        self.session.headers.update(headers or DEFAULT_HEADERS)

    def get(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        """GET ``url``; raises :class:`requests.RequestException` on failure."""
        resp = self.session.get(url, params=params, timeout=timeout or self.timeout)
        resp.raise_for_status()
        return resp

    def get_text(self, url: str, timeout: Optional[float] = None) -> str:
        resp = self.get(url, timeout=timeout)
        resp.encoding = resp.apparent_encoding or resp.encoding or "utf-8"
        return resp.text

    def close(self) -> None:
        self.session.close()
