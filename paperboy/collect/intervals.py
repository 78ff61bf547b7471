from __future__ import annotations

from typing import List

from paperboy.core.errors import ConfigurationError
from paperboy.core.models import TimeWindow


def plan_intervals(window: TimeWindow) -> List[int]:
    """Return the sample timestamps for ``window``.

    Samples start at ``window.start`` and advance by ``window.interval``; the
    first value at or past ``window.end`` is the last sample. A window shorter
    than one interval collapses to ``[start]``.
    """
    if window.interval <= 0:
        raise ConfigurationError(f"interval must be positive, got {window.interval}")
    if window.start > window.end:
        raise ConfigurationError(f"window start {window.start} is after end {window.end}")

    if window.end - window.start < window.interval:
        return [window.start]

    times: List[int] = []
    t = window.start
    while t < window.end:
        times.append(t)
        t += window.interval
    times.append(t)
    return times
