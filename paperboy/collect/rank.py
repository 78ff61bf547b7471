from __future__ import annotations

from typing import Iterable, List

from paperboy.core.config import DEFAULT_TOP_N
from paperboy.core.models import UniqueStory


def rank(stories: Iterable[UniqueStory], top_n: int = DEFAULT_TOP_N) -> List[UniqueStory]:
    """Sort by total visitors, highest first, and keep the first ``top_n``.

    Ties keep their incoming order.
    """
    if top_n < 1:
        raise ValueError(f"top_n must be at least 1, got {top_n}")
    ordered = sorted(stories, key=lambda s: s.total_visitors, reverse=True)
    return ordered[:top_n]
