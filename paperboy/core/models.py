from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class TimeWindow:
    """Sampling window in UNIX seconds; ``interval`` is the step between samples."""

    start: int
    end: int
    interval: int = 3600


@dataclass
class BucketSnapshot:
    """One stats-provider snapshot.

    ``titles`` holds (path, title) pairs in provider order and ``active`` holds
    (path, visitor total) pairs.
    """

    timestamp: int
    titles: List[Tuple[str, str]] = field(default_factory=list)
    active: List[Tuple[str, int]] = field(default_factory=list)


@dataclass(frozen=True)
class RawRecord:
    path: Optional[str]
    title: str
    visitors: int = 0


@dataclass(frozen=True)
class RewriteResult:
    title: str
    path: Optional[str]
    prefix: str = ""


@dataclass
class UniqueStory:
    url: str
    title: str
    total_visitors: int = 0


@dataclass(frozen=True)
class StoryPackage:
    url: str
    title: str
    visitors: int
    blurb: str = ""
    image: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
