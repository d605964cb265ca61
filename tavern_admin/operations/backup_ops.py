"""Fleet-wide backups into the centralized area, and a listing of past runs.

One run writes <backup_root>/<label>-<timestamp>/<handle>/<filename>.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from tavern_admin import ui
from tavern_admin.backup import admin_run_dir, copy_into_run
from tavern_admin.batch import run_batch
from tavern_admin.models import SUCCESS, AdminConfig, BatchReport, Skip
from tavern_admin.prompts import CANCELLED, ask_select, confirmed
from tavern_admin.users import discover_users

BACKUP_FILES = ("settings.json", "secrets.json", "content.log")


def backup_for_users(config: AdminConfig, users: Sequence[str], filename: str) -> tuple[BatchReport, Path]:
    """Copy ``filename`` from every user into one fresh run directory."""
    run_dir = admin_run_dir(config.backup_root, f"{filename.replace('.', '-')}-backup")

    def op(handle: str) -> str | Skip:
        source = config.data_root / handle / filename
        if not source.exists():
            return Skip(reason=f"no {filename}")
        copy_into_run(source, run_dir, handle, dry_run=config.dry_run)
        return SUCCESS

    report = run_batch(users, op, f"Backup {filename}")
    if not config.dry_run and report.succeeded:
        ui.success(f"Backups saved to: {run_dir}")
    return report, run_dir


def list_backups(config: AdminConfig) -> list[str]:
    """Backup run directories, newest first."""
    if not config.backup_root.is_dir():
        return []
    return sorted((p.name for p in config.backup_root.iterdir() if p.is_dir()), reverse=True)


def _show_backups(config: AdminConfig) -> None:
    ui.print_header("Admin Backups")
    if not config.backup_root.is_dir():
        ui.info("No backups directory found.")
        return
    runs = list_backups(config)
    if not runs:
        ui.info("No backups found.")
        return
    for name in runs:
        ui.console.print(f"  {name}", markup=False, highlight=False)
    ui.info(f"Location: {config.backup_root}")


def _backup_all(config: AdminConfig, filename: str) -> None:
    users = discover_users(config.data_root, config.exclude_dirs)
    if confirmed(f"Backup {filename} for all {len(users)} users?"):
        backup_for_users(config, users, filename)


def run(config: AdminConfig) -> None:
    action = ask_select("Backup operations", [
        ("settings", "Backup all settings.json: quick backup of all user settings"),
        ("specific", "Backup a specific file type: choose which file to backup"),
        ("list", "List existing backups"),
    ])
    if action is CANCELLED:
        return
    if action == "list":
        _show_backups(config)
    elif action == "settings":
        _backup_all(config, "settings.json")
    else:
        filename = ask_select("Which file to backup?", [(f, f) for f in BACKUP_FILES])
        if filename is CANCELLED:
            return
        _backup_all(config, filename)
