from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from paperboy.core.errors import ConfigurationError
from paperboy.core.utils import now_ts, parse_timestamp

DEFAULT_INTERVAL = 3600
DEFAULT_TOP_N = 10
DEFAULT_TIMEOUT = 10
DEFAULT_CONCURRENCY = 4
DEFAULT_IMG_QUERY = 'head meta[property="og:image"]'
DEFAULT_BLURB_QUERY = 'head meta[name="description"]'
DEFAULT_ATTRIBUTE = "content"

# env var -> config key; earlier names win when several are set
_ENV_KEYS: List[tuple] = [
    ("PAPERBOY_API_KEY", "api_key"),
    ("CHARTBEAT_API_KEY", "api_key"),
    ("PAPERBOY_HOST", "host"),
    ("PAPERBOY_START_TIME", "start_time"),
    ("PAPERBOY_END_TIME", "end_time"),
    ("PAPERBOY_INTERVAL", "interval"),
    ("PAPERBOY_TOP_N", "top_n"),
    ("PAPERBOY_TIMEOUT", "timeout"),
    ("PAPERBOY_CONCURRENCY", "concurrency"),
    ("PAPERBOY_IMG_QUERY", "img_query"),
    ("PAPERBOY_BLURB_QUERY", "blurb_query"),
    ("PAPERBOY_OUTFILE", "outfile"),
]


def load_config_file(path: Optional[str | Path]) -> Dict[str, Any]:
    """Load a YAML or JSON config file into a dict; a missing file yields ``{}``."""
    if not path:
        return {}
    p = Path(path)
    if not p.exists():
        return {}

    with p.open("r", encoding="utf-8") as f:
        if p.suffix.lower() in (".yml", ".yaml"):
            data = yaml.safe_load(f) or {}
        else:
            data = json.load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"config file {p} must contain a mapping")
    return data


def load_env() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for env_name, key in _ENV_KEYS:
        v = os.getenv(env_name)
        if v is not None and v != "" and key not in out:
            out[key] = v
    return out


def merge_config(*layers: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Merge layers left to right. ``None`` values never override."""
    merged: Dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        for k, v in layer.items():
            if v is not None:
                merged[k] = v
    return merged


def _as_int(conf: Mapping[str, Any], key: str, default: int) -> int:
    v = conf.get(key)
    if v is None or v == "":
        return default
    try:
        return int(v)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{key} must be an integer, got {v!r}") from e


def _as_ts(conf: Mapping[str, Any], key: str, default: int) -> int:
    v = conf.get(key)
    if v is None or v == "":
        return default
    try:
        return parse_timestamp(v)
    except ValueError as e:
        raise ConfigurationError(f"{key} is not a timestamp: {v!r}") from e


@dataclass
class CollectorConfig:
    api_key: Optional[str] = None
    host: Optional[str] = None
    # four hour default window ending an hour ago
    start_time: int = field(default_factory=lambda: now_ts() - 18000)
    end_time: int = field(default_factory=lambda: now_ts() - 3600)
    interval: int = DEFAULT_INTERVAL
    top_n: int = DEFAULT_TOP_N
    timeout: float = DEFAULT_TIMEOUT
    concurrency: int = DEFAULT_CONCURRENCY
    img_query: Optional[str] = DEFAULT_IMG_QUERY
    blurb_query: Optional[str] = DEFAULT_BLURB_QUERY
    attribute: str = DEFAULT_ATTRIBUTE
    rules: List[Dict[str, Any]] = field(default_factory=list)
    outfile: Optional[str] = None

    @classmethod
    def from_mapping(cls, conf: Mapping[str, Any]) -> "CollectorConfig":
        base = cls()
        rules = conf.get("rules") or conf.get("filters") or []
        if not isinstance(rules, list):
            raise ConfigurationError("rules must be a list of mappings")
        timeout = conf.get("timeout")
        try:
            timeout_val = float(timeout) if timeout not in (None, "") else base.timeout
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"timeout must be a number, got {timeout!r}") from e
        return cls(
            api_key=(str(conf["api_key"]) if conf.get("api_key") else None),
            host=(str(conf["host"]) if conf.get("host") else None),
            start_time=_as_ts(conf, "start_time", base.start_time),
            end_time=_as_ts(conf, "end_time", base.end_time),
            interval=_as_int(conf, "interval", DEFAULT_INTERVAL),
            top_n=_as_int(conf, "top_n", DEFAULT_TOP_N),
            timeout=timeout_val,
            concurrency=_as_int(conf, "concurrency", DEFAULT_CONCURRENCY),
            img_query=conf.get("img_query", DEFAULT_IMG_QUERY),
            blurb_query=conf.get("blurb_query", DEFAULT_BLURB_QUERY),
            attribute=str(conf.get("attribute") or DEFAULT_ATTRIBUTE),
            rules=list(rules),
            outfile=(str(conf["outfile"]) if conf.get("outfile") else None),
        )

    def validate(self, require_credentials: bool = True) -> "CollectorConfig":
        if require_credentials and (not self.api_key or not self.host):
            raise ConfigurationError("No Chartbeat API key or host specified")
        if not self.host:
            raise ConfigurationError("host is required to build story URLs")
        if self.interval <= 0:
            raise ConfigurationError(f"interval must be positive, got {self.interval}")
        if self.start_time > self.end_time:
            raise ConfigurationError(
                f"start_time {self.start_time} is after end_time {self.end_time}"
            )
        if self.top_n < 1:
            raise ConfigurationError(f"top_n must be at least 1, got {self.top_n}")
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")
        if self.concurrency < 1:
            raise ConfigurationError(f"concurrency must be at least 1, got {self.concurrency}")
        return self
