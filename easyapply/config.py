"""Load run settings from config/settings.yaml and the environment."""
from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from easyapply.log import get_logger

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "settings.yaml"
REPORTS_DIR: Path = ROOT_DIR / "reports"

DEFAULTS: dict[str, Any] = {
    "provider": "linkedin",
    "search": {
        "job_title": "Software Engineer",
        "location": "United States",
    },
    "limits": {
        "max_applications": 50,
        "max_pages": 20,
        "max_form_steps": 12,
    },
    "tracker": {
        "base_url": "http://localhost:5070",
        "timeout": 5,
    },
    "browser": {
        "headless": False,
        "user_data_dir": "browser_data",
        "slow_mo": 0,
    },
    "timeouts": {
        "cards": 10,
        "control": 5,
        "apply": 10,
        "submit": 10,
        "done": 5,
        "transition": 8,
        "poll_interval": 0.2,
    },
    "report": {
        "enabled": True,
    },
}

_TRUTHY = ("1", "true", "yes", "on")


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def load_settings(path: Path | None = None) -> dict[str, Any]:
    """Defaults, overlaid by the YAML file (if any), overlaid by env vars."""
    path = path or SETTINGS_PATH
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path.name} must contain a mapping, got {type(data).__name__}")
        log.debug("Loaded settings from %s", path)
    else:
        log.info("No %s found — using defaults", path.name)

    settings = _merge(DEFAULTS, data)

    provider = get_env("EASYAPPLY_PROVIDER")
    if provider:
        settings["provider"] = provider.lower()
    tracker_url = get_env("TRACKER_URL")
    if tracker_url:
        settings["tracker"]["base_url"] = tracker_url
    headless = get_env("RUN_HEADLESS")
    if headless:
        settings["browser"]["headless"] = headless.lower() in _TRUTHY

    # Poll interval is bounded; anything slower makes waits sluggish.
    interval = float(settings["timeouts"].get("poll_interval", 0.2))
    settings["timeouts"]["poll_interval"] = min(max(interval, 0.01), 0.25)
    return settings


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def ensure_dirs() -> None:
    REPORTS_DIR.mkdir(parents=True, exist_ok=True)
