"""Path helpers for the host application's data tree."""

from pathlib import Path

SNAPSHOT_SUBDIR = Path("backups") / "admin-snapshots"


def user_dir(data_root: Path, handle: str) -> Path:
    return data_root / handle


def user_characters_dir(data_root: Path, handle: str) -> Path:
    return data_root / handle / "characters"


def user_worlds_dir(data_root: Path, handle: str) -> Path:
    return data_root / handle / "worlds"


def user_chats_dir(data_root: Path, handle: str) -> Path:
    return data_root / handle / "chats"


def user_settings_path(data_root: Path, handle: str) -> Path:
    return data_root / handle / "settings.json"


def user_content_log_path(data_root: Path, handle: str) -> Path:
    return data_root / handle / "content.log"


def user_snapshot_dir(data_root: Path, handle: str) -> Path:
    """Owner-scoped snapshot area inside the user's own directory."""
    return data_root / handle / SNAPSHOT_SUBDIR


def cookie_secret_path(data_root: Path) -> Path:
    return data_root / "cookie-secret.txt"


def scaffold_index_path(scaffold_dir: Path) -> Path:
    return scaffold_dir / "index.json"


def scaffold_worlds_dir(scaffold_dir: Path) -> Path:
    return scaffold_dir / "worlds"


def content_index_path(content_dir: Path) -> Path:
    return content_dir / "index.json"
