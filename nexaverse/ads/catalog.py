"""Loading the default ad placement catalog."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml


@dataclass(frozen=True)
class AdCode:
    key: str
    name: str
    description: str
    code: str
    width: Optional[int] = None
    height: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "description": self.description,
            "code": self.code,
            "width": self.width,
            "height": self.height,
        }


def _build_ad_code(entry: Mapping[str, Any]) -> AdCode:
    key = entry.get("key")
    code = entry.get("code")
    if not key or not code:
        raise ValueError(f"Ad code entries need both 'key' and 'code': {dict(entry)!r}")
    width = entry.get("width")
    height = entry.get("height")
    return AdCode(
        key=str(key),
        name=str(entry.get("name") or key),
        description=str(entry.get("description") or ""),
        code=str(code).strip(),
        width=int(width) if width is not None else None,
        height=int(height) if height is not None else None,
    )


def load_ad_catalog(config_path: str | Path) -> Dict[str, AdCode]:
    """Load ad placements keyed by slot name, in file order."""
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Ad code configuration not found at {config_path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)

    entries: List[Any]
    if isinstance(data, list):
        entries = data
    elif isinstance(data, dict):
        entries = data.get("ad_codes", [])
        if not isinstance(entries, list):
            raise TypeError("`ad_codes` section must be a list of ad code definitions.")
    else:
        raise TypeError("ad_codes.yaml must define either a list or a mapping with an 'ad_codes' key.")

    catalog: Dict[str, AdCode] = {}
    for entry in entries:
        if not isinstance(entry, Mapping):
            raise TypeError("Each ad code definition must be a mapping.")
        ad_code = _build_ad_code(entry)
        catalog[ad_code.key] = ad_code
    return catalog
