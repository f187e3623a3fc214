"""Paths, environment and runtime settings."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from autoapply.log import get_logger

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
LABELS_PATH: Path = CONFIG_DIR / "labels.yaml"
DATA_DIR: Path = ROOT_DIR / "data"
LISTINGS_PATH: Path = DATA_DIR / "scraped_jobs.json"
APPLIED_PATH: Path = DATA_DIR / "job-applied.json"
RESUMES_DIR: Path = ROOT_DIR / "resumes"
REPORTS_DIR: Path = ROOT_DIR / "reports"

CANDIDATE_SUFFIXES: tuple[str, ...] = (".json", ".yaml", ".yml")


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _env_bool(key: str, default: bool) -> bool:
    raw = get_env(key)
    if not raw:
        return default
    return raw.lower() in ("1", "true", "yes", "on")


def _env_int(key: str, default: int) -> int:
    raw = get_env(key)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        log.warning("Ignoring non-integer %s=%r, using %d", key, raw, default)
        return default


@dataclass(frozen=True)
class Settings:
    """Runtime knobs. All timeouts are in milliseconds."""

    headless: bool = False
    nav_timeout_ms: int = 60_000
    form_timeout_ms: int = 8_000
    new_tab_timeout_ms: int = 8_000
    cookie_timeout_ms: int = 3_000
    click_timeout_ms: int = 10_000
    key_delay_ms: int = 60
    settle_ms: int = 3_000
    skip_applied: bool = True
    portal_url: str = "https://www.adecco.nl/vacatures"


def load_settings() -> Settings:
    """Build :class:`Settings` from the environment (``.env`` included)."""
    defaults = Settings()
    return Settings(
        headless=_env_bool("RUN_HEADLESS", defaults.headless),
        nav_timeout_ms=_env_int("NAV_TIMEOUT_MS", defaults.nav_timeout_ms),
        form_timeout_ms=_env_int("FORM_TIMEOUT_MS", defaults.form_timeout_ms),
        new_tab_timeout_ms=_env_int("NEW_TAB_TIMEOUT_MS", defaults.new_tab_timeout_ms),
        cookie_timeout_ms=_env_int("COOKIE_TIMEOUT_MS", defaults.cookie_timeout_ms),
        click_timeout_ms=_env_int("CLICK_TIMEOUT_MS", defaults.click_timeout_ms),
        key_delay_ms=_env_int("KEY_DELAY_MS", defaults.key_delay_ms),
        settle_ms=_env_int("SETTLE_MS", defaults.settle_ms),
        skip_applied=_env_bool("SKIP_APPLIED", defaults.skip_applied),
        portal_url=get_env("PORTAL_URL", defaults.portal_url),
    )


def load_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping; a missing file yields an empty dict."""
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path.name}: expected a mapping at top level")
    return data


def ensure_dirs() -> None:
    for d in (DATA_DIR, RESUMES_DIR, REPORTS_DIR):
        d.mkdir(parents=True, exist_ok=True)


def find_candidate_file(resumes_dir: Path = RESUMES_DIR) -> Path | None:
    """First JSON/YAML candidate record in the resumes folder."""
    if not resumes_dir.exists():
        return None
    for p in sorted(resumes_dir.iterdir()):
        if p.is_file() and p.suffix.lower() in CANDIDATE_SUFFIXES:
            return p
    return None
