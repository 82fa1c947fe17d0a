"""Load settings from config/settings.yaml, .env and the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from skillscout.log import get_logger

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "settings.yaml"
DATA_DIR: Path = ROOT_DIR / "data"


@dataclass
class Settings:
    source: str = "indeed"
    base_url: str = "https://in.indeed.com"
    country: str = "India"
    default_location: str = "India"
    rate_limit_ms: int = 3000
    max_retries: int = 2
    retry_base_ms: int = 1000
    timeout_s: float = 10.0
    interval_hours: float = 6.0
    target_delay_s: float = 5.0
    top_skills: int = 10
    retention_days: int = 30
    store_path: str = ""
    profiles_path: str = str(CONFIG_DIR / "profiles.yaml")
    lexicon_path: str = ""


# Environment variable → Settings field
_ENV_KEYS: dict[str, str] = {
    "SKILLSCOUT_SOURCE": "source",
    "SKILLSCOUT_BASE_URL": "base_url",
    "SKILLSCOUT_COUNTRY": "country",
    "SKILLSCOUT_DEFAULT_LOCATION": "default_location",
    "FETCH_RATE_LIMIT_MS": "rate_limit_ms",
    "FETCH_MAX_RETRIES": "max_retries",
    "FETCH_RETRY_BASE_MS": "retry_base_ms",
    "FETCH_TIMEOUT_S": "timeout_s",
    "SCRAPE_INTERVAL_HOURS": "interval_hours",
    "SCRAPE_TARGET_DELAY_S": "target_delay_s",
    "SCRAPE_TOP_SKILLS": "top_skills",
    "POSTING_RETENTION_DAYS": "retention_days",
    "STORE_PATH": "store_path",
    "PROFILES_PATH": "profiles_path",
    "LEXICON_PATH": "lexicon_path",
}

# Relative paths in these fields resolve against the repo root.
_PATH_FIELDS = ("store_path", "profiles_path", "lexicon_path")


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _coerce(value: Any, template: Any) -> Any:
    if isinstance(template, bool):
        return str(value).lower() in ("1", "true", "yes")
    if isinstance(template, int):
        return int(value)
    if isinstance(template, float):
        return float(value)
    return str(value)


def load_settings(path: Path | None = None) -> Settings:
    """Defaults, overlaid by the YAML file (if present), overlaid by env vars."""
    settings = Settings()
    known = {f.name for f in fields(Settings)}

    path = path or Path(get_env("SKILLSCOUT_SETTINGS") or SETTINGS_PATH)
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        for key, value in data.items():
            if key not in known:
                log.warning("Ignoring unknown setting %r in %s", key, path.name)
                continue
            setattr(settings, key, _coerce(value, getattr(settings, key)))

    for env_key, attr in _ENV_KEYS.items():
        raw = get_env(env_key)
        if raw:
            try:
                setattr(settings, attr, _coerce(raw, getattr(settings, attr)))
            except ValueError:
                log.warning("Invalid value for %s: %r (keeping %r)", env_key, raw, getattr(settings, attr))

    for attr in _PATH_FIELDS:
        value = getattr(settings, attr)
        if value and not Path(value).is_absolute():
            setattr(settings, attr, str(ROOT_DIR / value))

    return settings


def ensure_dirs() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
