"""Title/path rewrite rules.

A rewriter is any callable ``(title, path) -> RewriteResult``. The bundled
:class:`RuleRewriter` reads rules such as::

    rules:
      - prefix: tpmdc
        title_regex: '\\| TPMDC'
        modify_title: true
      - path_regex: '^/preview/'
        suppress: true

A rule matches when any of its regexes matches. Matching rules apply in
order and the last matching prefix wins.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Mapping, Optional

from paperboy.core.errors import ConfigurationError
from paperboy.core.models import RewriteResult

Rewriter = Callable[[str, Optional[str]], RewriteResult]


def identity_rewriter(title: str, path: Optional[str]) -> RewriteResult:
    return RewriteResult(title=title, path=path, prefix="")


@dataclass(frozen=True)
class FilterRule:
    prefix: str = ""
    title_regex: Optional[re.Pattern] = None
    path_regex: Optional[re.Pattern] = None
    modify_title: bool = False
    modify_path: bool = False
    suppress: bool = False

    def matches(self, title: str, path: Optional[str]) -> bool:
        if self.title_regex is not None and self.title_regex.search(title):
            return True
        if self.path_regex is not None and path is not None and self.path_regex.search(path):
            return True
        return False


def _compile(value: Any, key: str) -> Optional[re.Pattern]:
    if value is None or value == "":
        return None
    try:
        return re.compile(str(value))
    except re.error as e:
        raise ConfigurationError(f"invalid {key} {value!r}: {e}") from e


def load_rules(items: Iterable[Mapping[str, Any]]) -> List[FilterRule]:
    rules: List[FilterRule] = []
    for i, item in enumerate(items or []):
        if not isinstance(item, Mapping):
            raise ConfigurationError(f"rule #{i} must be a mapping")
        rule = FilterRule(
            prefix=str(item.get("prefix") or ""),
            title_regex=_compile(item.get("title_regex"), "title_regex"),
            path_regex=_compile(item.get("path_regex"), "path_regex"),
            modify_title=bool(item.get("modify_title", False)),
            modify_path=bool(item.get("modify_path", False)),
            suppress=bool(item.get("suppress", False)),
        )
        if rule.title_regex is None and rule.path_regex is None:
            raise ConfigurationError(f"rule #{i} needs title_regex or path_regex")
        rules.append(rule)
    return rules


class RuleRewriter:
    def __init__(self, rules: Iterable[FilterRule]) -> None:
        self.rules = list(rules)

    @classmethod
    def from_config(cls, items: Iterable[Mapping[str, Any]]) -> "RuleRewriter":
        return cls(load_rules(items))

    def __call__(self, title: str, path: Optional[str]) -> RewriteResult:
        prefix = ""
        for rule in self.rules:
            if not rule.matches(title, path):
                continue
            if rule.prefix:
                prefix = rule.prefix
            if rule.modify_title and rule.title_regex is not None:
                title = rule.title_regex.sub("", title).strip()
            if rule.modify_path and rule.path_regex is not None and path is not None:
                path = rule.path_regex.sub("", path)
                if not path.startswith("/"):
                    path = "/" + path
            if rule.suppress:
                path = None
        return RewriteResult(title=title, path=path, prefix=prefix)
