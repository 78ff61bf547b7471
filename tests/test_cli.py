from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

import paperboy.cli.main as cli
from conftest import FakeHttp, FakeSnapshotClient, page
from paperboy.collect.enrich import Enricher
from paperboy.collect.pipeline import Collector
from paperboy.core.models import BucketSnapshot

runner = CliRunner()


def test_plan_prints_timestamps():
    result = runner.invoke(cli.app, ["plan", "--start", "0", "--end", "7200"])
    assert result.exit_code == 0
    lines = result.output.strip().splitlines()
    assert [ln.split("\t")[0] for ln in lines] == ["0", "3600", "7200"]
    assert lines[0].endswith("1970-01-01T00:00:00+00:00")


def test_plan_rejects_zero_interval():
    result = runner.invoke(cli.app, ["plan", "--start", "0", "--end", "7200", "--interval", "0"])
    assert result.exit_code == 2


def test_run_without_credentials_exits_2(monkeypatch):
    for name in ("PAPERBOY_API_KEY", "CHARTBEAT_API_KEY", "PAPERBOY_HOST"):
        monkeypatch.delenv(name, raising=False)
    result = runner.invoke(cli.app, ["run"])
    assert result.exit_code == 2
    assert "Configuration error" in result.output


def _patch_collector(monkeypatch):
    client = FakeSnapshotClient(
        {
            0: BucketSnapshot(0, [("/a", "Title A")], [("/a", 3)]),
            3600: BucketSnapshot(3600, [("/b", "Title B")], [("/b", 5)]),
        }
    )
    http = FakeHttp(
        {
            "http://example.com/a": page(description="A blurb"),
            "http://example.com/b": page(image="b.jpg"),
        }
    )

    def factory(cfg):
        return Collector(cfg, client=client, enricher=Enricher(http=http))

    monkeypatch.setattr(cli, "Collector", factory, raising=True)


def test_run_writes_html(tmp_path: Path, monkeypatch):
    _patch_collector(monkeypatch)
    out = tmp_path / "out.html"
    result = runner.invoke(
        cli.app,
        ["run", "--api-key", "k", "--host", "example.com", "--start", "0", "--end", "3600", "-o", str(out)],
    )
    assert result.exit_code == 0, result.output
    html = out.read_text(encoding="utf-8")
    assert html.index("Title B") < html.index("Title A")
    assert '<div class="blurb">A blurb</div>' in html

    shown = runner.invoke(cli.app, ["show", str(out)])
    assert shown.exit_code == 0
    assert "Title B" in shown.output


def test_run_writes_json_from_config_file(tmp_path: Path, monkeypatch):
    _patch_collector(monkeypatch)
    conf = tmp_path / "paperboy.yml"
    conf.write_text(
        "api_key: k\nhost: example.com\nstart_time: 0\nend_time: 3600\ntop_n: 1\n",
        encoding="utf-8",
    )
    out = tmp_path / "out.html"
    result = runner.invoke(
        cli.app, ["run", "--config", str(conf), "--format", "json", "-o", str(out)]
    )
    assert result.exit_code == 0, result.output
    data = json.loads((tmp_path / "out.json").read_text(encoding="utf-8"))
    assert [s["title"] for s in data["stories"]] == ["Title B"]
    assert data["metadata"]["host"] == "example.com"


def test_show_missing_file(tmp_path: Path):
    result = runner.invoke(cli.app, ["show", str(tmp_path / "missing.html")])
    assert result.exit_code == 1
