"""Runtime settings resolved from the environment (and an optional .env file)."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_AD_CODES_PATH = PROJECT_ROOT / "configs" / "ad_codes.yaml"


@dataclass(frozen=True)
class Settings:
    mongo_url: str
    db_name: str
    public_base_url: str
    ad_codes_path: Path
    api_port: int


def _resolve_mongo_url() -> str:
    mongo_url = os.getenv("MONGO_URL") or os.getenv("MONGO_URI")
    return mongo_url or "mongodb://localhost:27017"


def _resolve_port(value: str | None) -> int:
    if not value:
        return 8000
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"API_PORT must be an integer, got {value!r}") from exc


def load_settings(*, use_dotenv: bool = True) -> Settings:
    """Read settings, letting real environment variables win over .env values."""
    if use_dotenv:
        load_dotenv()
    ad_codes_path = os.getenv("AD_CODES_PATH")
    return Settings(
        mongo_url=_resolve_mongo_url(),
        db_name=os.getenv("NEXAVERSE_DB") or "nexaverse",
        public_base_url=(os.getenv("PUBLIC_BASE_URL") or "http://localhost:8000").rstrip("/"),
        ad_codes_path=Path(ad_codes_path) if ad_codes_path else DEFAULT_AD_CODES_PATH,
        api_port=_resolve_port(os.getenv("API_PORT")),
    )
