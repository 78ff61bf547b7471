"""Story page metadata (image and blurb) extraction.

Queries are CSS selectors run through BeautifulSoup, e.g.
``head meta[property="og:image"]``. The first matching node's attribute
(``content`` by default) becomes the field value.
"""
from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

import requests
from bs4 import BeautifulSoup
from soupsieve import SelectorSyntaxError

from paperboy.collect.http_client import HttpClient
from paperboy.core.config import (
    DEFAULT_ATTRIBUTE,
    DEFAULT_BLURB_QUERY,
    DEFAULT_CONCURRENCY,
    DEFAULT_IMG_QUERY,
)
from paperboy.core.errors import ConfigurationError, EnrichmentFetchError
from paperboy.core.models import StoryPackage, UniqueStory
from paperboy.infra.logging import get_unified_logger, log_batch_processing


def _check_query(query: Optional[str], name: str) -> Optional[str]:
    if not query:
        return None
    try:
        BeautifulSoup("", "html.parser").select_one(query)
    except SelectorSyntaxError as e:
        raise ConfigurationError(f"invalid {name} {query!r}: {e}") from e
    return query


def extract_attribute(soup: BeautifulSoup, query: Optional[str], attribute: str) -> Optional[str]:
    """Return ``attribute`` of the first node matching ``query``, or None."""
    if not query:
        return None
    node = soup.select_one(query)
    if node is None:
        return None
    value = node.get(attribute)
    if isinstance(value, list):
        value = " ".join(value)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class Enricher:
    def __init__(
        self,
        img_query: Optional[str] = DEFAULT_IMG_QUERY,
        blurb_query: Optional[str] = DEFAULT_BLURB_QUERY,
        attribute: str = DEFAULT_ATTRIBUTE,
        timeout: float = 10,
        http: Optional[HttpClient] = None,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        self.img_query = _check_query(img_query, "img_query")
        self.blurb_query = _check_query(blurb_query, "blurb_query")
        self.attribute = attribute
        self.timeout = timeout
        self.http = http or HttpClient(timeout=timeout)
        self.concurrency = max(1, int(concurrency))
        self.logger = get_unified_logger("collect", "enrich")

    def fetch_page(self, url: str) -> str:
        try:
            return self.http.get_text(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise EnrichmentFetchError(url, str(e), e) from e

    def enrich(self, story: UniqueStory) -> Optional[StoryPackage]:
        """Build a package for ``story``; None when its page is unreachable."""
        try:
            html = self.fetch_page(story.url)
        except EnrichmentFetchError as e:
            self.logger.info("dropping unreachable story %r: %s", story.title, e)
            return None

        soup = BeautifulSoup(html, "html.parser")
        image = extract_attribute(soup, self.img_query, self.attribute)
        blurb = extract_attribute(soup, self.blurb_query, self.attribute)
        return StoryPackage(
            url=story.url,
            title=story.title,
            visitors=story.total_visitors,
            blurb=blurb or "",
            image=image or "",
        )

    def enrich_each(self, stories: List[UniqueStory]) -> List[Optional[StoryPackage]]:
        """Enrich concurrently; slot ``i`` is the package for ``stories[i]`` or None."""
        if not stories:
            return []
        t0 = time.perf_counter()
        with ThreadPoolExecutor(max_workers=min(self.concurrency, len(stories))) as ex:
            futs = [ex.submit(self.enrich, s) for s in stories]
            results = [f.result() for f in futs]
        kept = sum(1 for p in results if p is not None)
        log_batch_processing(
            "collect",
            "enrich",
            "enrich_stories",
            total_items=len(stories),
            success_count=kept,
            failure_count=len(stories) - kept,
            duration=time.perf_counter() - t0,
            status="success",
        )
        return results

    def enrich_all(self, stories: List[UniqueStory]) -> List[StoryPackage]:
        """Enrich concurrently, keeping the input order of the survivors."""
        return [p for p in self.enrich_each(stories) if p is not None]
