from __future__ import annotations

import json
import logging

from paperboy.infra import logging as plog


def test_levels_from_env(monkeypatch):
    monkeypatch.setenv("PAPERBOY_LOG_LEVEL", "warn")
    assert plog._level_from_env("PAPERBOY_LOG_LEVEL") == logging.WARNING
    monkeypatch.setenv("PAPERBOY_LOG_LEVEL", "trace")
    assert plog._level_from_env("PAPERBOY_LOG_LEVEL") == plog.TRACE_LEVEL
    monkeypatch.setenv("PAPERBOY_LOG_LEVEL", "bogus")
    assert plog._level_from_env("PAPERBOY_LOG_LEVEL") == logging.INFO


def test_build_config_json_layout(monkeypatch):
    monkeypatch.setenv("PAPERBOY_LOG_JSON", "1")
    cfg = plog.build_logging_config()
    assert cfg["handlers"]["console"]["formatter"] == "json"


def test_mdc_filter_and_json_formatter():
    plog.mdc_put("host", "example.com")
    try:
        record = logging.LogRecord("paperboy.t", logging.INFO, __file__, 1, "hello %s", ("x",), None)
        assert plog.MDCFilter().filter(record)
        assert record.mdc_suffix == " | MDC: host=example.com"
        payload = json.loads(plog.JSONFormatter().format(record))
        assert payload["message"] == "hello x"
        assert payload["mdc"] == {"host": "example.com"}
    finally:
        plog.mdc_remove("host")
    after = logging.LogRecord("paperboy.t", logging.INFO, __file__, 1, "bye", (), None)
    plog.MDCFilter().filter(after)
    assert after.mdc_suffix == ""


def test_unified_logger_name_and_print(capsys):
    logger = plog.get_unified_logger("collect", "pipeline")
    assert logger.name == "paperboy.collect.pipeline"
    plog.unified_print("hi", "collect", "pipeline")
    assert "[collect][pipeline] hi" in capsys.readouterr().out


def test_log_error_includes_context_and_traceback(caplog):
    try:
        raise ValueError("bad payload")
    except ValueError as e:
        err = e
    with caplog.at_level(logging.ERROR, logger="paperboy.collect.pipeline"):
        plog.log_error("collect", "pipeline", err, "bucket 3600")
    [record] = [r for r in caplog.records if r.name == "paperboy.collect.pipeline"]
    assert record.levelno == logging.ERROR
    assert record.getMessage() == "bucket 3600 | bad payload"
    assert record.exc_info[1] is err
