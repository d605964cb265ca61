"""Bulk edits of each user's settings.json.

Four modes, all sharing one per-user flow (read, snapshot, transform, write):

  set keys       dot-path = value pairs
  sync template  copy chosen sections from a golden settings.json
  link lorebook  add a lorebook name to a flat list (world_info.globalSelect)
  charLore       upsert {name, extraBooks} into
                 world_info_settings.world_info.charLore by character name

A user without settings.json is skipped. Corrupt JSON, or a file whose top
level is not an object, fails that user only.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from tavern_admin import ui
from tavern_admin.backup import backup_user_file
from tavern_admin.batch import run_batch
from tavern_admin.merge import Mutation, append_unique, apply_mutations, describe_value, parse_value, sync_sections, upsert_named
from tavern_admin.models import SUCCESS, AdminConfig, BatchReport, Skip
from tavern_admin.paths import user_settings_path
from tavern_admin.prompts import CANCELLED, ask_multiselect, ask_select, ask_text, confirmed, existing_file, not_blank
from tavern_admin.users import select_users

CHARLORE_PATH = "world_info_settings.world_info.charLore"
GLOBAL_SELECT_PATH = "world_info.globalSelect"

# (settings) -> (new settings, dry-run description)
Transform = Callable[[dict[str, Any]], "tuple[dict[str, Any], str]"]


def read_settings(path: Path) -> dict[str, Any] | None:
    """Parse settings.json. None if missing; raises on corrupt content."""
    if not path.is_file():
        return None
    settings = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(settings, dict):
        raise ValueError("settings.json is not a JSON object")
    return settings


def write_settings(path: Path, settings: dict[str, Any]) -> None:
    path.write_text(json.dumps(settings, indent=2, ensure_ascii=False, allow_nan=False) + "\n", encoding="utf-8")


def _edit_settings(config: AdminConfig, users: Sequence[str], label: str, transform: Transform) -> BatchReport:
    def op(handle: str) -> str | Skip:
        path = user_settings_path(config.data_root, handle)
        settings = read_settings(path)
        if settings is None:
            return Skip(reason="no settings.json")

        updated, action = transform(settings)
        backup_user_file(config.data_root, handle, "settings.json", dry_run=config.dry_run)
        if config.dry_run:
            ui.info(f"[DRY RUN] Would {action} in {path}")
        else:
            write_settings(path, updated)
        return SUCCESS

    return run_batch(users, op, label)


def set_key_values(config: AdminConfig, users: Sequence[str], mutations: Sequence[Mutation]) -> BatchReport:
    paths = ", ".join(path for path, _ in mutations)
    return _edit_settings(
        config, users, "Bulk Set Key/Values",
        lambda s: (apply_mutations(s, mutations), f"set {paths}"),
    )


def sync_from_template(
    config: AdminConfig, users: Sequence[str], template: dict[str, Any], keys: Sequence[str]
) -> BatchReport:
    return _edit_settings(
        config, users, "Sync from Template",
        lambda s: (sync_sections(s, template, keys), f"sync {', '.join(keys)}"),
    )


def link_lorebook(
    config: AdminConfig, users: Sequence[str], lorebook: str, settings_key: str = GLOBAL_SELECT_PATH
) -> BatchReport:
    lorebook = lorebook.strip()

    def transform(settings: dict[str, Any]) -> tuple[dict[str, Any], str]:
        updated, added = append_unique(settings, settings_key, lorebook)
        verb = "add" if added else "keep"
        return updated, f'{verb} "{lorebook}" in {settings_key}'

    return _edit_settings(config, users, "Link Lorebook", transform)


def add_char_lore(
    config: AdminConfig, users: Sequence[str], char_name: str, extra_books: Sequence[str]
) -> BatchReport:
    """Upsert a charLore entry; an existing entry for the character is replaced
    and moves to the end of the list."""
    entry = {"name": char_name.strip(), "extraBooks": list(extra_books)}

    def transform(settings: dict[str, Any]) -> tuple[dict[str, Any], str]:
        updated, replaced = upsert_named(settings, CHARLORE_PATH, entry)
        verb = "replace" if replaced else "add"
        return updated, f'{verb} charLore entry for "{entry["name"]}"'

    return _edit_settings(config, users, "Add charLore Entry", transform)


# ── Interactive ────────────────────────────────────────────


def collect_mutations() -> list[Mutation]:
    """Ask for dot-path/value pairs until an empty path is entered."""
    mutations: list[Mutation] = []
    while True:
        prompt = ("Settings key (dot-path, e.g. world_info_depth)" if not mutations
                  else "Another key (leave empty to finish)")
        path = ask_text(
            prompt, default="" if mutations else None,
            validate=lambda v: "At least one key is required" if not mutations and not v.strip() else None,
        )
        if path is CANCELLED or not path.strip():
            return mutations
        raw = ask_text(f'Value for "{path.strip()}" (type is auto-detected)',
                       validate=not_blank("Value is required"))
        if raw is CANCELLED:
            return mutations
        value = parse_value(raw)
        mutations.append((path.strip(), value))
        ui.info(f"{path.strip()} = {describe_value(value)}")


def _run_set_keys(config: AdminConfig) -> None:
    mutations = collect_mutations()
    if not mutations:
        return
    ui.print_header("Mutations to apply")
    for path, value in mutations:
        ui.info(f"{path} = {json.dumps(value)}")

    users = select_users(config)
    if users is CANCELLED or not users:
        return
    if confirmed(f"Apply {len(mutations)} mutation(s) to {len(users)} user(s)?"):
        set_key_values(config, users, mutations)


def _run_sync_template(config: AdminConfig) -> None:
    template_path = ask_text("Path to the golden template settings.json", validate=existing_file)
    if template_path is CANCELLED:
        return
    try:
        template = json.loads(Path(template_path.strip()).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        ui.error(f"Failed to parse template: {e}")
        return
    if not isinstance(template, dict) or not template:
        ui.warn("Template has no keys.")
        return

    def hint(value: Any) -> str:
        if isinstance(value, (dict, list)):
            return "array" if isinstance(value, list) else "object"
        return f"{type(value).__name__}: {json.dumps(value)[:30]}"

    keys = ask_multiselect("Sections to sync", [(k, f"{k} ({hint(v)})") for k, v in template.items()])
    if keys is CANCELLED:
        return

    users = select_users(config)
    if users is CANCELLED or not users:
        return
    if confirmed(f"Sync {len(keys)} section(s) from template to {len(users)} user(s)?"):
        sync_from_template(config, users, template, keys)


def _run_link_lorebook(config: AdminConfig) -> None:
    name = ask_text('Lorebook filename to link (e.g. "MyLorebook.json")',
                    validate=not_blank("Filename is required"))
    if name is CANCELLED:
        return
    key = ask_text("Settings key path for the lorebook list", default=GLOBAL_SELECT_PATH,
                   validate=not_blank("Key is required"))
    if key is CANCELLED:
        return

    users = select_users(config)
    if users is CANCELLED or not users:
        return
    if confirmed(f'Add "{name.strip()}" to "{key.strip()}" for {len(users)} user(s)?'):
        link_lorebook(config, users, name, key.strip())


def _run_char_lore(config: AdminConfig) -> None:
    char_name = ask_text("Character name (exactly as it appears on the card)",
                         validate=not_blank("Character name is required"))
    if char_name is CANCELLED:
        return

    books: list[str] = []
    while True:
        book = ask_text(
            "Lorebook name for extraBooks" if not books else "Another lorebook (leave empty to finish)",
            default="" if books else None,
            validate=lambda v: "At least one lorebook is required" if not books and not v.strip() else None,
        )
        if book is CANCELLED or not book.strip():
            break
        books.append(book.strip())
        ui.info(f"Added: {book.strip()}")
    if not books:
        return

    ui.print_header("charLore entry to add")
    ui.info(json.dumps({"name": char_name.strip(), "extraBooks": books}, indent=2))

    users = select_users(config)
    if users is CANCELLED or not users:
        return
    if confirmed(f'Add charLore entry for "{char_name.strip()}" to {len(users)} user(s)? '
                "An existing entry for this character is replaced."):
        add_char_lore(config, users, char_name, books)


def run(config: AdminConfig) -> None:
    mode = ask_select("How would you like to edit settings?", [
        ("charlore", "Add charLore entry: link lorebooks to a character"),
        ("keys", "Set specific key/value pairs: enter dot-paths and values"),
        ("template", "Sync from golden template: pick sections from a template file"),
        ("lorebook", "Link lorebook to globalSelect: add lorebook to a flat array"),
    ])
    if mode is CANCELLED:
        return
    {
        "charlore": _run_char_lore,
        "keys": _run_set_keys,
        "template": _run_sync_template,
        "lorebook": _run_link_lorebook,
    }[mode](config)
