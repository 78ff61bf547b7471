# -*- coding: utf-8 -*-
from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest
import requests

# Ensure project root is importable for tests
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from paperboy.core.errors import BucketFetchError  # noqa: E402
from paperboy.core.models import BucketSnapshot  # noqa: E402


class FakeSnapshotClient:
    """Serves canned buckets; a timestamp mapped to an exception raises it."""

    def __init__(self, buckets: Dict[int, Union[BucketSnapshot, Exception]]) -> None:
        self.buckets = buckets
        self.calls: List[int] = []

    def fetch_snapshot(self, timestamp: int) -> BucketSnapshot:
        self.calls.append(timestamp)
        item = self.buckets.get(timestamp)
        if isinstance(item, Exception):
            raise item
        if item is None:
            raise BucketFetchError(timestamp, "no such bucket")
        return item


class FakeHttp:
    """Stands in for HttpClient.get_text; unknown URLs raise ConnectionError."""

    def __init__(self, pages: Optional[Dict[str, str]] = None) -> None:
        self.pages = pages or {}
        self.requested: List[str] = []

    def get_text(self, url: str, timeout: Optional[float] = None) -> str:
        self.requested.append(url)
        if url not in self.pages:
            raise requests.ConnectionError(f"cannot reach {url}")
        return self.pages[url]


def page(image: Optional[str] = None, description: Optional[str] = None) -> str:
    head = ["<title>t</title>"]
    if image is not None:
        head.append(f'<meta property="og:image" content="{image}">')
    if description is not None:
        head.append(f'<meta name="description" content="{description}">')
    return f"<html><head>{''.join(head)}</head><body><p>body</p></body></html>"


@pytest.fixture
def fake_http() -> FakeHttp:
    return FakeHttp()
