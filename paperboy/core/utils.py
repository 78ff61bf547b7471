from __future__ import annotations

import re
import time
from datetime import datetime, timezone
from typing import Union


def now_stamp() -> str:
    """Return a YYYYMMDD_HHMMSS timestamp."""
    return time.strftime("%Y%m%d_%H%M%S")


def now_ts() -> int:
    return int(time.time())


def format_ts(ts: int) -> str:
    """Render UNIX seconds as an ISO-8601 UTC string."""
    return datetime.fromtimestamp(int(ts), tz=timezone.utc).isoformat()


def parse_timestamp(value: Union[int, float, str, datetime]) -> int:
    """Accept UNIX seconds, a datetime, or an ISO-8601 string.

    Naive ISO strings are taken as UTC.
    """
    if isinstance(value, bool):
        raise ValueError(f"not a timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, datetime):
        dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return int(dt.timestamp())
    s = str(value).strip()
    if re.fullmatch(r"-?\d+(\.\d+)?", s):
        return int(float(s))
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


def safe_filename(filename: str, max_length: int = 255) -> str:
    """Replace characters that are unsafe in file names and cap the length."""
    if not filename:
        return f"untitled_{now_stamp()}"
    name = re.sub(r"[\\/:*?\"<>|]", "_", filename.strip())
    name = re.sub(r"\s+", " ", name).strip()
    if not name:
        name = f"untitled_{now_stamp()}"
    return name[:max_length]
