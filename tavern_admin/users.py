"""User discovery, interactive selection, and per-user stats."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from tavern_admin.models import AdminConfig, UserStats
from tavern_admin.paths import user_characters_dir, user_chats_dir, user_settings_path, user_worlds_dir
from tavern_admin.prompts import CANCELLED, Cancelled, ask_multiselect, ask_select


class DiscoveryError(RuntimeError):
    """Raised when the data directory cannot be scanned."""


def discover_users(data_root: Path, exclude_dirs: Iterable[str]) -> list[str]:
    """Sorted user handles: subdirectories of data_root, minus excluded names,
    dot-dirs and underscore-prefixed dirs."""
    excluded = set(exclude_dirs)
    try:
        entries = list(data_root.iterdir())
    except OSError as e:
        raise DiscoveryError(f'Cannot read data directory "{data_root}": {e}') from e
    return sorted(
        p.name for p in entries
        if p.is_dir()
        and p.name not in excluded
        and not p.name.startswith(("_", "."))
    )


def select_users(config: AdminConfig) -> list[str] | Cancelled:
    """Ask for "all users" or a hand-picked subset."""
    all_users = discover_users(config.data_root, config.exclude_dirs)
    if not all_users:
        raise DiscoveryError("No users found in the data directory.")

    scope = ask_select(
        f"Found {len(all_users)} users. Select scope",
        [("all", f"All users ({len(all_users)})"), ("pick", "Pick specific users")],
    )
    if scope is CANCELLED:
        return CANCELLED
    if scope == "all":
        return all_users

    return ask_multiselect("Select users", [(h, h) for h in all_users])


def _count(directory: Path, suffix: str | None = None, dirs: bool = False) -> int:
    if not directory.is_dir():
        return 0
    if dirs:
        return sum(1 for p in directory.iterdir() if p.is_dir())
    return sum(1 for p in directory.iterdir() if p.name.endswith(suffix or ""))


def get_user_stats(data_root: Path, handle: str) -> UserStats:
    return UserStats(
        character_count=_count(user_characters_dir(data_root, handle), ".png"),
        chat_dir_count=_count(user_chats_dir(data_root, handle), dirs=True),
        world_count=_count(user_worlds_dir(data_root, handle), ".json"),
        has_settings=user_settings_path(data_root, handle).is_file(),
    )
