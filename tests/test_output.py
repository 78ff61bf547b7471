from __future__ import annotations

import json
from pathlib import Path

import pytest

from paperboy.core.errors import PaperboyError
from paperboy.core.models import StoryPackage
from paperboy.services.output import (
    default_outfile,
    read_output,
    render_html,
    save_packages_json,
    write_output,
)


def test_render_html_optional_sections_and_escaping():
    html = render_html(
        [
            StoryPackage("http://h/a", "A & B", 3, blurb="Short <b>", image="http://img/a.jpg"),
            StoryPackage("http://h/b", "Bare", 1),
        ]
    )
    assert html.count('<div class="story">') == 2
    assert '<h2><a href="http://h/a">A &amp; B</a></h2>' in html
    assert '<img src="http://img/a.jpg">' in html
    assert '<div class="blurb">Short &lt;b&gt;</div>' in html
    assert html.count('class="img"') == 1
    assert html.count('class="blurb"') == 1


def test_default_outfile():
    assert default_outfile("example.com") == "example.com_paperboy_output.html"


def test_write_and_read_output(tmp_path: Path):
    p = write_output("<div></div>", tmp_path / "out" / "page.html")
    assert read_output(p) == "<div></div>"


def test_read_missing_output(tmp_path: Path):
    with pytest.raises(PaperboyError):
        read_output(tmp_path / "nope.html")


def test_save_packages_json(tmp_path: Path):
    p = save_packages_json(
        [StoryPackage("http://h/a", "A", 3)], tmp_path / "out.json", {"host": "h"}
    )
    data = json.loads(p.read_text(encoding="utf-8"))
    assert data["metadata"]["host"] == "h"
    assert data["metadata"]["count"] == 1
    assert data["stories"][0] == {
        "url": "http://h/a",
        "title": "A",
        "visitors": 3,
        "blurb": "",
        "image": "",
    }
