from __future__ import annotations

from pathlib import Path

import pytest

from nexaverse.ads.catalog import load_ad_catalog
from nexaverse.ads.fragments import ScriptFragment, extract_script_fragments, run_fragments, strip_scripts
from nexaverse.ads.overrides import AdCodeOverrides, delete_override, load_overrides, save_override

PROJECT_ROOT = Path(__file__).resolve().parents[1]

BANNER = """<script type="text/javascript">
  atOptions = {'key': 'abc', 'format': 'iframe', 'height': 90, 'width': 728};
</script>
<script type="text/javascript" src="//ads.example.com/abc/invoke.js"></script>
<div id="container-abc"></div>"""


def test_bundled_catalog_loads() -> None:
    catalog = load_ad_catalog(PROJECT_ROOT / "configs" / "ad_codes.yaml")
    assert {"directLink", "footerBanner", "headerBanner", "nativeAd", "popupAd", "socialBar"} <= set(catalog)
    assert catalog["footerBanner"].width == 728
    assert catalog["footerBanner"].height == 90
    assert catalog["popupAd"].width is None
    assert catalog["nativeAd"].code.startswith("<script")


def test_catalog_errors(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_ad_catalog(tmp_path / "missing.yaml")

    scalar = tmp_path / "scalar.yaml"
    scalar.write_text("just text\n", encoding="utf-8")
    with pytest.raises(TypeError):
        load_ad_catalog(scalar)

    no_code = tmp_path / "no_code.yaml"
    no_code.write_text("- key: slot\n  name: Slot\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_ad_catalog(no_code)


def test_catalog_accepts_bare_list(tmp_path: Path) -> None:
    path = tmp_path / "ads.yaml"
    path.write_text("- key: slot\n  code: \"<div></div>\"\n", encoding="utf-8")
    catalog = load_ad_catalog(path)
    assert catalog["slot"].name == "slot"
    assert catalog["slot"].description == ""


def test_overrides_resolve_with_fallback() -> None:
    shared = {}
    overrides = AdCodeOverrides(shared)
    assert overrides.resolve("footerBanner", "default") == "default"

    overrides.set("footerBanner", "<script>edited()</script>")
    assert shared["footerBanner"] == "<script>edited()</script>"
    assert overrides.resolve("footerBanner", "default") == "<script>edited()</script>"
    assert "footerBanner" in overrides

    overrides.set("footerBanner", "")
    assert overrides.resolve("footerBanner", "default") == "default"
    assert "footerBanner" not in overrides

    overrides.set("a", "1")
    overrides.clear("a")
    overrides.clear("never-set")
    assert overrides.snapshot() == {"footerBanner": ""}
    overrides.clear_all()
    assert shared == {}


def test_overrides_persist_in_database(fake_db) -> None:
    save_override(fake_db, "socialBar", "<script>one()</script>")
    save_override(fake_db, "socialBar", "<script>two()</script>")
    save_override(fake_db, "popupAd", "<script>pop()</script>")

    overrides = load_overrides(fake_db)
    assert overrides.snapshot() == {"socialBar": "<script>two()</script>", "popupAd": "<script>pop()</script>"}

    assert delete_override(fake_db, "socialBar") == 1
    assert load_overrides(fake_db).resolve("socialBar", "fallback") == "fallback"
    assert delete_override(fake_db) == 1
    assert load_overrides(fake_db).snapshot() == {}


def test_extract_script_fragments_in_document_order() -> None:
    fragments = extract_script_fragments(BANNER)
    assert len(fragments) == 2
    assert fragments[0].src is None
    assert "atOptions" in fragments[0].code
    assert fragments[0].attrs == {"type": "text/javascript"}
    assert fragments[1].src == "//ads.example.com/abc/invoke.js"
    assert fragments[1].is_external


def test_extract_script_fragments_skips_empty_inline_scripts() -> None:
    html = '<script></script><script async="async" data-cfasync="false" src="//x/y.js"></script>'
    fragments = extract_script_fragments(html)
    assert fragments == [ScriptFragment(src="//x/y.js", code="", attrs={"async": "async", "data-cfasync": "false"})]
    assert extract_script_fragments("") == []
    assert extract_script_fragments("<div>no scripts</div>") == []


def test_strip_scripts_keeps_markup() -> None:
    assert strip_scripts(BANNER) == '<div id="container-abc"></div>'
    assert strip_scripts("") == ""


def test_run_fragments_hands_each_fragment_to_executor() -> None:
    seen = []
    count = run_fragments(extract_script_fragments(BANNER), seen.append)
    assert count == 2
    assert [fragment.is_external for fragment in seen] == [False, True]
