"""Log4j-aligned logging utilities for the collector.

- Hierarchical loggers (e.g. ``paperboy.collect.snapshot``)
- Console appender on stderr
- Pattern layout or JSON layout
- Levels aligned with Log4j, including ``TRACE`` (custom) and ``FATAL`` (alias of CRITICAL)
- MDC (Mapped Diagnostic Context) support via ``contextvars``

Configuration via environment variables (prefix: PAPERBOY_):
- ``PAPERBOY_LOG_LEVEL``: TRACE, DEBUG, INFO, WARN, ERROR, FATAL (default: INFO)
- ``PAPERBOY_LOG_JSON``: 1 to enable JSON layout (default: 0)
"""

from __future__ import annotations

import contextvars
import json
import logging
import logging.config
import os
from typing import Any, Dict, Optional

# ---------------- Levels: add TRACE ----------------

TRACE_LEVEL = 5
if logging.getLevelName(TRACE_LEVEL) != "TRACE":
    logging.addLevelName(TRACE_LEVEL, "TRACE")


def _trace(self: logging.Logger, msg: str, *args: Any, **kwargs: Any) -> None:
    if self.isEnabledFor(TRACE_LEVEL):
        self._log(TRACE_LEVEL, msg, args, **kwargs)


if not hasattr(logging.Logger, "trace"):
    logging.Logger.trace = _trace  # type: ignore[attr-defined]


# ---------------- MDC (Mapped Diagnostic Context) ----------------

_MDC: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar("MDC", default={})


def mdc_put(key: str, value: Any) -> None:
    d = dict(_MDC.get())
    d[key] = value
    _MDC.set(d)


def mdc_remove(key: str) -> None:
    d = dict(_MDC.get())
    d.pop(key, None)
    _MDC.set(d)


class MDCFilter(logging.Filter):
    """Inject MDC into LogRecord as dict and compact string."""

    def filter(self, record: logging.LogRecord) -> bool:
        d = _MDC.get()
        setattr(record, "mdc", d)
        if d:
            mdc_str = " ".join(f"{k}={v}" for k, v in d.items())
            setattr(record, "mdc_str", mdc_str)
            setattr(record, "mdc_suffix", f" | MDC: {mdc_str}")
        else:
            setattr(record, "mdc_str", "")
            setattr(record, "mdc_suffix", "")
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        mdc = getattr(record, "mdc", None)
        if isinstance(mdc, dict) and mdc:
            payload["mdc"] = mdc
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


# ---------------- Utilities ----------------

_CONFIGURED = False
_CACHE: Dict[str, logging.Logger] = {}


def _env_bool(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).strip().lower() in {"1", "true", "yes", "on"}


def _level_from_env(name: str, default: str = "INFO") -> int:
    s = str(os.getenv(name, default)).strip().upper()
    aliases = {"WARN": "WARNING", "FATAL": "CRITICAL"}
    s = aliases.get(s, s)
    if s == "TRACE":
        return TRACE_LEVEL
    level = logging.getLevelName(s)
    return level if isinstance(level, int) else logging.INFO


def build_logging_config() -> Dict[str, Any]:
    """Build a dictConfig resembling Log4j concepts (appenders/layouts)."""
    json_layout = _env_bool("PAPERBOY_LOG_JSON", False)
    level = _level_from_env("PAPERBOY_LOG_LEVEL", "INFO")

    fmt = "[%(asctime)s][%(levelname)s][%(name)s] %(message)s%(mdc_suffix)s"
    datefmt = "%Y-%m-%d %H:%M:%S"

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"mdc": {"()": MDCFilter}},
        "formatters": {
            "pattern": {"()": logging.Formatter, "format": fmt, "datefmt": datefmt},
            "json": {"()": JSONFormatter},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "json" if json_layout else "pattern",
                "filters": ["mdc"],
                "stream": "ext://sys.stderr",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
    }


def init_logging(force: bool = False) -> None:
    """Initialize global logging using dictConfig.

    Safe to call multiple times; no-op if already configured unless ``force``.
    """
    global _CONFIGURED
    if _CONFIGURED and not force:
        return
    logging.config.dictConfig(build_logging_config())
    _CONFIGURED = True


def _ensure_logging() -> None:
    if not _CONFIGURED and not logging.getLogger("").handlers:
        init_logging()


def get_unified_logger(program: str, task_type: str) -> logging.Logger:
    """Return a hierarchical logger like ``paperboy.<program>.<task_type>``."""
    _ensure_logging()
    name = f"paperboy.{program}.{task_type}".strip(".")
    if name in _CACHE:
        return _CACHE[name]
    logger = logging.getLogger(name)
    _CACHE[name] = logger
    return logger


def unified_print(message: str, program: str, task_type: str, level: str = "info") -> None:
    """Console echo + logger write."""
    logger = get_unified_logger(program, task_type)
    print(f"[{program}][{task_type}] {message}")
    lvl = str(level or "info").strip().lower()
    if lvl == "trace":
        logger.trace(message)  # type: ignore[attr-defined]
    elif lvl in {"fatal", "critical"}:
        logger.critical(message)
    else:
        log_fn = getattr(logger, lvl, logger.info)
        log_fn(message)


def log_task_start(program: str, task_type: str, details: Optional[Dict[str, Any]] = None) -> None:
    logger = get_unified_logger(program, task_type)
    logger.info("[TASK START] %s", json.dumps(details or {}, ensure_ascii=False))


def log_task_end(
    program: str, task_type: str, success: bool, details: Optional[Dict[str, Any]] = None
) -> None:
    logger = get_unified_logger(program, task_type)
    payload: Dict[str, Any] = {"success": success}
    if details:
        payload.update(details)
    logger.info("[TASK END] %s", json.dumps(payload, ensure_ascii=False))


def log_error(program: str, task_type: str, error: BaseException, context: str = "") -> None:
    """Log ``error`` at ERROR with its traceback, prefixed by ``context`` when given."""
    logger = get_unified_logger(program, task_type)
    exc_info = (type(error), error, error.__traceback__)
    if context:
        logger.error("%s | %s", context, error, exc_info=exc_info)
    else:
        logger.error("%s", error, exc_info=exc_info)


def log_batch_processing(
    program: str,
    task_type: str,
    operation: str,
    total_items: int,
    success_count: int,
    failure_count: int,
    duration: float,
    status: str,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    logger = get_unified_logger(program, task_type)
    payload: Dict[str, Any] = {
        "operation": operation,
        "total": total_items,
        "success": success_count,
        "failed": failure_count,
        "duration": round(duration, 3),
        "status": status,
    }
    if extra:
        payload.update(extra)
    logger.info("[BATCH] %s", json.dumps(payload, ensure_ascii=False))


__all__ = [
    "TRACE_LEVEL",
    "init_logging",
    "build_logging_config",
    "mdc_put",
    "mdc_remove",
    "get_unified_logger",
    "unified_print",
    "log_task_start",
    "log_task_end",
    "log_error",
    "log_batch_processing",
]
