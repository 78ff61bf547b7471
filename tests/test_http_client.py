from __future__ import annotations

import pytest
import requests

from paperboy.collect.enrich import Enricher
from paperboy.collect.http_client import HttpClient
from paperboy.core.models import StoryPackage, UniqueStory


def _response(url: str, status: int, body: str = "") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.url = url
    resp._content = body.encode("utf-8")
    return resp


class _Routes:
    """Replaces Session.get; records the keyword arguments of every call."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def __call__(self, url, **kwargs):
        self.calls.append((url, kwargs))
        status, body = self.routes[url]
        return _response(url, status, body)


def _client(monkeypatch, routes, **kw) -> tuple:
    client = HttpClient(**kw)
    fake = _Routes(routes)
    monkeypatch.setattr(client.session, "get", fake)
    return client, fake


def test_default_timeout_applies_when_none_given(monkeypatch):
    client, fake = _client(monkeypatch, {"http://h/ok": (200, "ok")}, timeout=7)
    client.get("http://h/ok")
    client.get("http://h/ok", timeout=2)
    assert [kw["timeout"] for _, kw in fake.calls] == [7, 2]


@pytest.mark.parametrize("status", [404, 500, 503])
def test_error_status_raises_request_exception(monkeypatch, status):
    client, _ = _client(monkeypatch, {"http://h/x": (status, "nope")})
    with pytest.raises(requests.RequestException):
        client.get("http://h/x")


def test_get_text_decodes_body(monkeypatch):
    client, _ = _client(monkeypatch, {"http://h/ok": (200, "<p>hello</p>")})
    assert "hello" in client.get_text("http://h/ok")


def test_no_automatic_retries():
    client = HttpClient()
    for scheme in ("http://h/", "https://h/"):
        assert client.session.get_adapter(scheme).max_retries.total == 0
    client.close()


def test_enricher_drops_pages_with_error_status(monkeypatch):
    html = '<html><head><meta name="description" content="ok"></head></html>'
    client, _ = _client(
        monkeypatch,
        {"http://h/ok": (200, html), "http://h/err": (500, ""), "http://h/nf": (404, "")},
        timeout=2,
    )
    enricher = Enricher(http=client)
    assert enricher.enrich(UniqueStory("http://h/err", "Err", 1)) is None
    assert enricher.enrich(UniqueStory("http://h/nf", "Gone", 1)) is None
    assert enricher.enrich(UniqueStory("http://h/ok", "Ok", 1)) == StoryPackage(
        "http://h/ok", "Ok", 1, blurb="ok"
    )
