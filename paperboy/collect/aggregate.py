"""Merge per-bucket snapshot records into unique stories.

Stories are keyed by their (rewritten) title. When one title shows up under
several paths, the URL of the first record folded in is kept and later
records only add their visitors.
"""
from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional, Tuple

from paperboy.collect.rewrite import Rewriter
from paperboy.core.models import BucketSnapshot, RawRecord, UniqueStory


def join_bucket(snapshot: BucketSnapshot) -> List[RawRecord]:
    """Attach visitor totals to a bucket's titles by exact path match.

    Titles without a matching active path get 0 visitors. If a path repeats
    in the active list, its first total is used.
    """
    visitors_by_path: Dict[str, int] = {}
    for path, total in snapshot.active:
        visitors_by_path.setdefault(path, int(total or 0))
    return [
        RawRecord(path=path, title=title, visitors=visitors_by_path.get(path, 0))
        for path, title in snapshot.titles
    ]


def build_url(host: str, path: str, prefix: str = "") -> str:
    if prefix:
        return f"http://{prefix}.{host}{path}"
    return f"http://{host}{path}"


class Aggregator:
    def __init__(self, host: str, rewriter: Optional[Rewriter] = None) -> None:
        self.host = host
        self.rewriter = rewriter
        self._stories: Dict[str, UniqueStory] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._stories)

    def _resolve(self, record: RawRecord) -> Optional[Tuple[str, str]]:
        """Return (url, title) for a record, or None when it has no path."""
        title, path, prefix = record.title, record.path, ""
        if self.rewriter is not None:
            res = self.rewriter(title, path)
            title, path, prefix = res.title, res.path, res.prefix or ""
        if path is None:
            return None
        return build_url(self.host, path, prefix), title

    def fold(self, records: Iterable[RawRecord]) -> None:
        """Fold one bucket's records into the running collection."""
        with self._lock:
            for record in records:
                resolved = self._resolve(record)
                if resolved is None:
                    continue
                url, title = resolved
                existing = self._stories.get(title)
                if existing is None:
                    self._stories[title] = UniqueStory(
                        url=url, title=title, total_visitors=record.visitors
                    )
                else:
                    existing.total_visitors += record.visitors

    def fold_snapshot(self, snapshot: BucketSnapshot) -> None:
        self.fold(join_bucket(snapshot))

    def stories(self) -> List[UniqueStory]:
        """Unique stories in first-seen order."""
        with self._lock:
            return list(self._stories.values())


def aggregate(
    buckets: Iterable[BucketSnapshot], host: str, rewriter: Optional[Rewriter] = None
) -> List[UniqueStory]:
    """Fold ``buckets`` in the given order and return the unique stories."""
    agg = Aggregator(host, rewriter)
    for bucket in buckets:
        agg.fold_snapshot(bucket)
    return agg.stories()
