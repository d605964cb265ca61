"""content.log: the host application's record of what it has seeded per user.

Deleting it makes the next restart re-seed all scaffold content.
"""

from __future__ import annotations

from collections.abc import Sequence

from tavern_admin import ui
from tavern_admin.backup import backup_user_file
from tavern_admin.batch import run_batch
from tavern_admin.models import SUCCESS, AdminConfig, BatchReport, Skip
from tavern_admin.paths import user_content_log_path
from tavern_admin.prompts import CANCELLED, ask_select, confirmed
from tavern_admin.users import select_users


def reset_content_log(config: AdminConfig, users: Sequence[str]) -> BatchReport:
    """Snapshot and delete content.log for each user."""

    def op(handle: str) -> str | Skip:
        path = user_content_log_path(config.data_root, handle)
        if not path.exists():
            return Skip(reason="no content.log")
        backup_user_file(config.data_root, handle, "content.log", dry_run=config.dry_run)
        if config.dry_run:
            ui.info(f"[DRY RUN] Would delete {path}")
            return SUCCESS
        path.unlink()
        return SUCCESS

    return run_batch(users, op, "Reset Content Log")


def read_content_log(config: AdminConfig, handle: str) -> list[str] | None:
    """Non-empty lines of a user's content.log, or None if there is none."""
    path = user_content_log_path(config.data_root, handle)
    if not path.is_file():
        return None
    return [line.strip() for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]


def _view(config: AdminConfig, users: Sequence[str]) -> None:
    for handle in users:
        lines = read_content_log(config, handle)
        if lines is None:
            ui.console.print(f"  {handle}: (no content.log)", markup=False, highlight=False)
            continue
        ui.console.print(f"  {handle}: {len(lines)} entries", markup=False, highlight=False)
        for line in lines:
            ui.info(f"  - {line}")
    ui.console.print()


def run(config: AdminConfig) -> None:
    action = ask_select("Content log operations", [
        ("reset", "Full reset (delete content.log): re-seeds all content on restart"),
        ("view", "View content.log entries: see what has been seeded"),
    ])
    if action is CANCELLED:
        return

    users = select_users(config)
    if users is CANCELLED or not users:
        return

    if action == "view":
        _view(config, users)
        return
    if not confirmed(
        f"Delete content.log for {len(users)} user(s)? "
        "This will cause ALL scaffold content to be re-seeded on next ST restart."
    ):
        return
    reset_content_log(config, users)
    ui.info("Restart SillyTavern (Fresh Login Reset) to trigger re-seeding.")
