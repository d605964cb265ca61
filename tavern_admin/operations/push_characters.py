"""Distribute character cards (PNG) to users.

Immediate push copies the card into each user's characters/ directory; an
existing card of the same name is snapshotted first. Registering a card
copies it into the scaffold or content directory and adds a "character"
entry to that index.json, so the host application seeds it to new users on
its next restart.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Sequence
from pathlib import Path
from typing import Literal

from tavern_admin import ui
from tavern_admin.backup import backup_to_admin, backup_user_file
from tavern_admin.batch import run_batch
from tavern_admin.content_index import add_entry, read_index, write_index
from tavern_admin.models import SUCCESS, AdminConfig, BatchReport, Skip
from tavern_admin.paths import user_characters_dir
from tavern_admin.prompts import CANCELLED, ask_select, ask_text, confirmed
from tavern_admin.users import select_users

logger = logging.getLogger(__name__)

IndexTarget = Literal["scaffold", "content"]


def push_card(config: AdminConfig, users: Sequence[str], source: Path, label: str = "Push Character Card") -> BatchReport:
    """Copy ``source`` into every user's characters/ directory."""

    def op(handle: str) -> str | Skip:
        if not source.is_file():
            return Skip(reason=f"source {source} not found")
        target_dir = user_characters_dir(config.data_root, handle)
        target = target_dir / source.name

        backup_user_file(config.data_root, handle, Path("characters") / source.name, dry_run=config.dry_run)
        if config.dry_run:
            ui.info(f"[DRY RUN] Would copy {source} -> {target}")
            return SUCCESS
        target_dir.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)
        return SUCCESS

    return run_batch(users, op, label)


def register_card(config: AdminConfig, source: Path, target: IndexTarget) -> Path:
    """Copy the card into the scaffold/content dir and index it. Returns the
    index path."""
    target_dir = config.scaffold_dir if target == "scaffold" else config.content_dir
    index_path = target_dir / "index.json"
    entry = {"filename": source.name, "type": "character"}

    if config.dry_run:
        ui.info(f"[DRY RUN] Would copy {source} -> {target_dir / source.name}")
        ui.info(f"[DRY RUN] Would add entry to {index_path}")
        return index_path

    dest = target_dir / source.name
    target_dir.mkdir(parents=True, exist_ok=True)
    if not (dest.exists() and dest.resolve() == source.resolve()):
        backup_to_admin(config.backup_root, dest, f"{target}-card")
        shutil.copyfile(source, dest)

    entries = read_index(index_path)
    updated = add_entry(entries, entry)
    if updated != entries:
        backup_to_admin(config.backup_root, index_path, f"{target}-index")
        write_index(index_path, updated)
        ui.success(f'Added "{source.name}" to {index_path}')
    else:
        ui.info(f'"{source.name}" is already listed in {index_path}')
    logger.debug("registered %s in %s", source.name, index_path)
    return index_path


def _validate_png(value: str) -> str | None:
    value = value.strip()
    if not value:
        return "Path is required"
    if not Path(value).is_file():
        return "File not found"
    if not value.lower().endswith(".png"):
        return "File must be a .png"
    return None


def _immediate_push(config: AdminConfig) -> None:
    path = ask_text("Path to the character card PNG", validate=_validate_png)
    if path is CANCELLED:
        return
    source = Path(path.strip())
    ui.info(f"Character card: {source.name}")

    users = select_users(config)
    if users is CANCELLED or not users:
        return
    if confirmed(f'Push "{source.name}" to {len(users)} user(s)?'):
        push_card(config, users, source)


def _scaffold_push(config: AdminConfig) -> None:
    path = ask_text("Path to the character card PNG", validate=_validate_png)
    if path is CANCELLED:
        return
    source = Path(path.strip())

    target = ask_select("Add to which index?", [
        ("scaffold", "Scaffold (default/scaffold/index.json): structural defaults"),
        ("content", "Content (default/content/index.json): distributed content"),
    ])
    if target is CANCELLED:
        return
    register_card(config, source, target)

    if not confirmed("Also push to existing users right now?"):
        ui.info("Done. The card will be seeded to new users on next ST restart.")
        return

    users = select_users(config)
    if users is CANCELLED or not users:
        return
    push_card(config, users, source, "Push Character Card to Existing Users")


def run(config: AdminConfig) -> None:
    mode = ask_select("How would you like to push character cards?", [
        ("immediate", "Immediate push: copy directly to user directories"),
        ("scaffold", "Scaffold-based: add to index + optionally push now"),
    ])
    if mode is CANCELLED:
        return
    if mode == "immediate":
        _immediate_push(config)
    else:
        _scaffold_push(config)
