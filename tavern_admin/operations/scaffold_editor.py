"""Interactive editor for the scaffold or content index.json.

Every write snapshots the current index into the centralized backup area
first. In dry-run mode the edited index is kept in memory only, so several
edits can be previewed in one session.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from rich.table import Table
from rich.text import Text

from tavern_admin import ui
from tavern_admin.backup import backup_to_admin
from tavern_admin.content_index import (
    CONTENT_TYPES,
    add_entry,
    find_entry,
    read_index,
    remove_entries,
    update_entry,
    write_index,
)
from tavern_admin.models import AdminConfig
from tavern_admin.paths import content_index_path, scaffold_index_path
from tavern_admin.prompts import CANCELLED, ask_multiselect, ask_select, ask_text, confirmed, not_blank

Entries = list[dict[str, Any]]


def save_index(config: AdminConfig, index_path: Path, entries: Entries, label: str, description: str) -> None:
    """Snapshot then write the index (or just describe it in dry-run)."""
    if config.dry_run:
        backup_to_admin(config.backup_root, index_path, label, dry_run=True)
        ui.info(f"[DRY RUN] Would {description} in {index_path}")
        return
    backup_to_admin(config.backup_root, index_path, label)
    write_index(index_path, entries)
    ui.success(f"{description[0].upper()}{description[1:]}.")


def display_index(entries: Entries, title: str) -> None:
    if not entries:
        ui.console.print("  (no entries)", style="dim")
        return
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Filename", style="cyan")
    table.add_column("Type", style="magenta")
    for i, entry in enumerate(entries, start=1):
        table.add_row(str(i), Text(entry.get("filename") or "unnamed"), Text(entry.get("type") or "unknown"))
    ui.console.print(table)


def _type_options(current: str | None = None) -> list[tuple[str, str]]:
    return [(value, f"{label} (current)" if value == current else label) for value, label in CONTENT_TYPES.items()]


def add_new_entry(config: AdminConfig, index_path: Path, entries: Entries, label: str) -> Entries:
    """Ask for a filename (listing files beside the index) and a type."""
    directory = index_path.parent
    files = sorted(p.name for p in directory.iterdir() if p.is_file() and p.name != "index.json") \
        if directory.is_dir() else []

    filename: Any
    if files:
        filename = ask_select("Select a file or enter a custom filename",
                              [*[(f, f) for f in files], ("__custom__", "Enter custom filename...")])
        if filename is CANCELLED:
            return entries
        if filename == "__custom__":
            filename = ask_text("Filename", validate=not_blank("Required"))
    else:
        filename = ask_text("Filename", validate=not_blank("Required"))
    if filename is CANCELLED:
        return entries

    content_type = ask_select("Content type", _type_options())
    if content_type is CANCELLED:
        return entries

    entry = {"filename": filename.strip(), "type": content_type}
    if find_entry(entries, entry["filename"]) is not None:
        ui.warn(f'"{entry["filename"]}" is already in the index.')
        return entries
    updated = add_entry(entries, entry)
    save_index(config, index_path, updated, label, f"add entry {json.dumps(entry)}")
    return updated


def remove_existing_entries(config: AdminConfig, index_path: Path, entries: Entries, label: str) -> Entries:
    if not entries:
        ui.warn("No entries to remove.")
        return entries
    doomed = ask_multiselect("Entries to remove",
                             [(e.get("filename"), f"{e.get('filename')} ({e.get('type')})") for e in entries])
    if doomed is CANCELLED:
        return entries
    if not confirmed(f"Remove {len(doomed)} entry/entries from the index?"):
        return entries
    updated = remove_entries(entries, doomed)
    save_index(config, index_path, updated, label, f"remove {len(doomed)} entry/entries")
    return updated


def edit_existing_entry(config: AdminConfig, index_path: Path, entries: Entries, label: str) -> Entries:
    if not entries:
        ui.warn("No entries to edit.")
        return entries
    filename = ask_select("Entry to edit",
                          [(e.get("filename"), f"{e.get('filename')} ({e.get('type')})") for e in entries])
    if filename is CANCELLED:
        return entries
    entry = find_entry(entries, filename) or {}

    new_filename = ask_text("New filename (enter to keep)", default=entry.get("filename", ""))
    if new_filename is CANCELLED:
        return entries
    new_type = ask_select("New type", _type_options(entry.get("type")))
    if new_type is CANCELLED:
        return entries

    updates: dict[str, Any] = {}
    if new_filename.strip() and new_filename.strip() != entry.get("filename"):
        if find_entry(entries, new_filename.strip()) is not None:
            ui.warn(f'"{new_filename.strip()}" is already in the index.')
            return entries
        updates["filename"] = new_filename.strip()
    if new_type != entry.get("type"):
        updates["type"] = new_type
    if not updates:
        ui.info("No changes made.")
        return entries

    updated = update_entry(entries, filename, updates)
    save_index(config, index_path, updated, label, f"update entry for {filename}: {json.dumps(updates)}")
    return updated


_ACTIONS = {
    "add": add_new_entry,
    "remove": remove_existing_entries,
    "edit": edit_existing_entry,
}


def run(config: AdminConfig) -> None:
    which = ask_select("Which index?", [
        ("scaffold", "Scaffold (default/scaffold/index.json)"),
        ("content", "Content (default/content/index.json)"),
    ])
    if which is CANCELLED:
        return
    index_path = scaffold_index_path(config.scaffold_dir) if which == "scaffold" \
        else content_index_path(config.content_dir)
    label = f"{which}-index"
    entries = read_index(index_path)

    while True:
        ui.print_header(f"{which.capitalize()} index.json")
        display_index(entries, str(index_path))
        action = ask_select("What would you like to do?", [
            ("add", "Add entry"),
            ("remove", "Remove entries"),
            ("edit", "Edit entry"),
            ("back", "Back to main menu"),
        ])
        if action is CANCELLED or action == "back":
            return
        entries = _ACTIONS[action](config, index_path, entries, label)
