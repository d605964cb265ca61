"""Tool configuration: config.json + .env overrides, validated once at startup.

Lookup order for the file: explicit path, TAVERN_ADMIN_CONFIG, then
config.json next to the project. When no file exists an interactive first-run
setup writes one. Environment overrides (after .env is loaded):

    TAVERN_ADMIN_DATA_ROOT   replaces data_root (derived dirs follow)
    TAVERN_ADMIN_DRY_RUN     "1"/"true"/"yes" forces dry-run

The result is a frozen AdminConfig that every operation receives explicitly.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from tavern_admin import ui
from tavern_admin.models import AdminConfig
from tavern_admin.prompts import CANCELLED, Cancelled, ask_text, not_blank

logger = logging.getLogger(__name__)

ROOT = Path(__file__).parent.parent
DEFAULT_CONFIG_PATH = ROOT / "config.json"

DEFAULTS: dict[str, Any] = {
    "st_root": "/root/SillyTavern",
    "data_root": "/root/SillyTavern/data",
    "exclude_dirs": ["default", "_storage"],
    "server_port": 8000,
    "pm2_name": "sillytavern",
    "dry_run": False,
}

_TRUE = {"1", "true", "yes", "on"}


class ConfigError(RuntimeError):
    """Raised when config.json cannot be parsed or fails validation."""


def config_path(explicit: Path | None = None) -> Path:
    if explicit is not None:
        return explicit
    env = os.getenv("TAVERN_ADMIN_CONFIG")
    return Path(env) if env else DEFAULT_CONFIG_PATH


def build_config(raw: dict[str, Any]) -> AdminConfig:
    """Merge defaults, stored values and environment overrides, then validate."""
    merged: dict[str, Any] = dict(DEFAULTS)
    merged.update({k: v for k, v in raw.items() if v is not None})

    env_root = os.getenv("TAVERN_ADMIN_DATA_ROOT")
    if env_root:
        merged["data_root"] = env_root
        for derived in ("scaffold_dir", "content_dir", "backup_root"):
            if derived not in raw:
                merged.pop(derived, None)
    if os.getenv("TAVERN_ADMIN_DRY_RUN", "").strip().lower() in _TRUE:
        merged["dry_run"] = True

    try:
        return AdminConfig.model_validate(merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid config: {e}") from e


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Failed to parse {path}: top level must be an object")
    return raw


def save_config(path: Path, config: AdminConfig) -> None:
    data = config.model_dump(mode="json")
    data["exclude_dirs"] = list(config.exclude_dirs)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def _port(value: str) -> str | None:
    return None if value.strip().isdigit() else "Must be a number"


def create_config_interactively(path: Path) -> AdminConfig | Cancelled:
    """First-run setup: ask for the essentials and write config.json."""
    ui.warn("No config.json found. Let's set one up.")

    st_root = ask_text("SillyTavern root directory", default=DEFAULTS["st_root"], validate=not_blank("Path is required"))
    if st_root is CANCELLED:
        return CANCELLED
    data_root = ask_text("SillyTavern data directory", default=f"{st_root.strip()}/data", validate=not_blank("Path is required"))
    if data_root is CANCELLED:
        return CANCELLED
    pm2_name = ask_text("pm2 process name for SillyTavern", default=DEFAULTS["pm2_name"])
    if pm2_name is CANCELLED:
        return CANCELLED
    port = ask_text("SillyTavern server port", default=str(DEFAULTS["server_port"]), validate=_port)
    if port is CANCELLED:
        return CANCELLED

    config = build_config({
        "st_root": st_root.strip(),
        "data_root": data_root.strip(),
        "pm2_name": pm2_name.strip(),
        "server_port": int(port.strip()),
    })
    save_config(path, config)
    ui.success(f"Config written to {path}")
    return config


def validate_paths(config: AdminConfig) -> list[str]:
    """Warn (don't fail) about configured roots missing on this machine."""
    missing = [f"{name}: {getattr(config, name)}" for name in ("st_root", "data_root")
               if not getattr(config, name).exists()]
    if missing:
        ui.warn(
            "Some configured paths don't exist on this machine:\n    "
            + "\n    ".join(missing)
            + "\n    This is expected when running locally for development."
        )
    return missing


def load_config(path: Path | None = None, *, interactive: bool = True) -> AdminConfig | Cancelled:
    """Load, fill defaults, apply overrides and validate the config."""
    load_dotenv(ROOT / ".env")
    path = config_path(path)

    if path.is_file():
        config = build_config(_read_config_file(path))
    elif interactive:
        created = create_config_interactively(path)
        if created is CANCELLED:
            return CANCELLED
        config = created
    else:
        raise ConfigError(f"No config file at {path}")

    logger.debug("config loaded from %s (dry_run=%s)", path, config.dry_run)
    validate_paths(config)
    return config
