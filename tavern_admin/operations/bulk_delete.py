"""Delete one character card or lorebook from many users.

With ``backup_first`` each file is snapshotted into the user's own snapshot
area before it is removed. A symlinked lorebook is unlinked; the shared
source stays in place.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from tavern_admin import ui
from tavern_admin.backup import backup_user_file
from tavern_admin.batch import run_batch
from tavern_admin.links import link_status
from tavern_admin.models import SUCCESS, AdminConfig, BatchReport, Skip
from tavern_admin.prompts import CANCELLED, ask_select, ask_text, confirmed, not_blank
from tavern_admin.users import select_users

CONTENT_DIRS = {
    "character": "characters",
    "world": "worlds",
}


def content_path(config: AdminConfig, handle: str, content_type: str, filename: str) -> Path:
    return config.data_root / handle / CONTENT_DIRS[content_type] / filename


def count_present(config: AdminConfig, users: Sequence[str], content_type: str, filename: str) -> int:
    return sum(1 for h in users if link_status(content_path(config, h, content_type, filename)) != "missing")


def delete_content(
    config: AdminConfig,
    users: Sequence[str],
    content_type: str,
    filename: str,
    backup_first: bool = True,
) -> BatchReport:
    filename = filename.strip()
    relative = Path(CONTENT_DIRS[content_type]) / filename

    def op(handle: str) -> str | Skip:
        path = content_path(config, handle, content_type, filename)
        if link_status(path) == "missing":
            return Skip(reason="file not found")
        if backup_first:
            backup_user_file(config.data_root, handle, relative, dry_run=config.dry_run)
        if config.dry_run:
            ui.info(f"[DRY RUN] Would delete {path}")
            return SUCCESS
        path.unlink()
        return SUCCESS

    return run_batch(users, op, f"Delete {filename}")


def run(config: AdminConfig) -> None:
    content_type = ask_select("What type of content to delete?", [
        ("character", "Character card (.png): from characters/"),
        ("world", "World/Lorebook (.json): from worlds/"),
    ])
    if content_type is CANCELLED:
        return
    filename = ask_text('Filename to delete (e.g. "OldChar.png" or "OldLore.json")',
                        validate=not_blank("Filename is required"))
    if filename is CANCELLED:
        return
    filename = filename.strip()

    users = select_users(config)
    if users is CANCELLED or not users:
        return

    count = count_present(config, users, content_type, filename)
    ui.info(f'Found "{filename}" in {count} of {len(users)} user directories.')
    if count == 0:
        ui.info("Nothing to delete.")
        return

    backup_first = confirmed("Create backups before deleting?", default=True)
    if not confirmed(f'DELETE "{filename}" from {count} user(s)? This cannot be undone without backups.'):
        return
    delete_content(config, users, content_type, filename, backup_first)
