"""Splitting ad markup into executable script fragments.

Browsers do not run ``<script>`` tags inserted through ``innerHTML``, so ad
markup is delivered as plain markup plus an ordered list of script fragments
that the page re-creates one by one. Running them is up to the caller.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from bs4 import BeautifulSoup


@dataclass(frozen=True)
class ScriptFragment:
    src: Optional[str] = None
    code: str = ""
    attrs: Dict[str, str] = field(default_factory=dict)

    @property
    def is_external(self) -> bool:
        return bool(self.src)

    def to_dict(self) -> Dict[str, object]:
        return {"src": self.src, "code": self.code, "attrs": dict(self.attrs)}


def _attr_value(value: object) -> str:
    # bs4 returns multi-valued attributes such as class as lists.
    if isinstance(value, (list, tuple)):
        return " ".join(str(item) for item in value)
    return str(value)


def extract_script_fragments(html: str) -> List[ScriptFragment]:
    """Return the script tags of ``html`` in document order."""
    if not html or not html.strip():
        return []
    soup = BeautifulSoup(html, "html.parser")
    fragments: List[ScriptFragment] = []
    for tag in soup.find_all("script"):
        attrs = {name: _attr_value(value) for name, value in tag.attrs.items()}
        src = attrs.pop("src", None) or None
        code = tag.string or tag.get_text() or ""
        if not src and not code.strip():
            continue
        fragments.append(ScriptFragment(src=src, code=code.strip(), attrs=attrs))
    return fragments


def strip_scripts(html: str) -> str:
    """Return ``html`` without its script tags."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all("script"):
        tag.decompose()
    return str(soup).strip()


def run_fragments(fragments: Iterable[ScriptFragment], executor: Callable[[ScriptFragment], None]) -> int:
    """Hand each fragment to ``executor`` in order and return how many were handed over.

    This is the hook for hosts that run ad scripts themselves (a page
    renderer, a headless browser): the API only returns fragments, and the
    host passes them here with its own executor.
    """
    count = 0
    for fragment in fragments:
        executor(fragment)
        count += 1
    return count
