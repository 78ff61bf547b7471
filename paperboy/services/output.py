from __future__ import annotations

import json
from html import escape
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from paperboy.core.errors import PaperboyError
from paperboy.core.models import StoryPackage
from paperboy.core.utils import now_stamp, safe_filename
from paperboy.infra.logging import unified_print


def default_outfile(host: str) -> str:
    return safe_filename(f"{host}_paperboy_output.html")


def render_html(packages: Iterable[StoryPackage]) -> str:
    """Bare-bones markup: one ``div.story`` per package, image and blurb when present."""
    parts: List[str] = []
    for pkg in packages:
        url = escape(pkg.url, quote=True)
        parts.append('<div class="story">\n')
        parts.append(f'  <h2><a href="{url}">{escape(pkg.title)}</a></h2>\n')
        if pkg.image:
            img = escape(pkg.image, quote=True)
            parts.append(f'  <div class="img"><a href="{url}"><img src="{img}"></a></div>\n')
        if pkg.blurb:
            parts.append(f'  <div class="blurb">{escape(pkg.blurb)}</div>\n')
        parts.append("</div>\n")
    return "".join(parts)


def write_output(text: str, path: str | Path) -> Path:
    p = Path(path)
    if p.parent and not p.parent.exists():
        p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    unified_print(f"output saved: {p}", "output", "write")
    return p


def save_packages_json(
    packages: Iterable[StoryPackage],
    path: str | Path,
    metadata: Optional[Dict[str, Any]] = None,
) -> Path:
    stories = [p.to_dict() for p in packages]
    meta: Dict[str, Any] = {"generated_at": now_stamp(), "count": len(stories)}
    if metadata:
        meta.update(metadata)
    payload = {"metadata": meta, "stories": stories}
    return write_output(json.dumps(payload, ensure_ascii=False, indent=2), path)


def read_output(path: str | Path) -> str:
    p = Path(path)
    if not p.exists():
        raise PaperboyError(f"No result file: {p}. Try calling `run` first in this directory")
    return p.read_text(encoding="utf-8")
