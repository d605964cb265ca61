"""Read-only views: a stats table of all users, and one user's details."""

from __future__ import annotations

import os
from pathlib import Path

from rich.table import Table
from rich.text import Text

from tavern_admin import ui
from tavern_admin.links import link_status
from tavern_admin.models import AdminConfig
from tavern_admin.paths import user_characters_dir, user_dir, user_worlds_dir
from tavern_admin.prompts import CANCELLED, ask_select
from tavern_admin.users import discover_users, get_user_stats

MAX_LISTED_CHARACTERS = 20


def disk_usage(directory: Path) -> int:
    """Total size in bytes of regular files under ``directory`` (symlinks not followed)."""
    total = 0
    for root, _dirs, files in os.walk(directory):
        for name in files:
            path = Path(root) / name
            if not path.is_symlink():
                try:
                    total += path.stat().st_size
                except OSError:
                    continue
    return total


def list_all_users(config: AdminConfig) -> None:
    users = discover_users(config.data_root, config.exclude_dirs)
    if not users:
        ui.warn("No users found.")
        return

    table = Table(title=f"All Users ({len(users)})")
    table.add_column("User Handle")
    table.add_column("Chars", justify="right")
    table.add_column("Chats", justify="right")
    table.add_column("Worlds", justify="right")
    table.add_column("Settings", justify="right")
    for handle in users:
        stats = get_user_stats(config.data_root, handle)
        table.add_row(
            Text(handle),
            str(stats.character_count),
            str(stats.chat_dir_count),
            str(stats.world_count),
            "[green]Yes[/green]" if stats.has_settings else "[red]No[/red]",
        )
    ui.console.print(table)


def view_user_details(config: AdminConfig, handle: str) -> None:
    directory = user_dir(config.data_root, handle)
    stats = get_user_stats(config.data_root, handle)

    ui.print_header(f"User: {handle}")
    ui.console.print(f"  [bold]Directory:[/bold]  {directory}", highlight=False)
    ui.console.print(f"  [bold]Disk Usage:[/bold] {ui.format_bytes(disk_usage(directory))}")
    ui.console.print(f"  [bold]Characters:[/bold] {stats.character_count}")
    ui.console.print(f"  [bold]Chat Dirs:[/bold]  {stats.chat_dir_count}")
    ui.console.print(f"  [bold]Worlds:[/bold]     {stats.world_count}")
    ui.console.print(f"  [bold]Settings:[/bold]   {'[green]Yes[/green]' if stats.has_settings else '[red]No[/red]'}")

    chars_dir = user_characters_dir(config.data_root, handle)
    if chars_dir.is_dir():
        chars = sorted(p.name for p in chars_dir.iterdir() if p.suffix == ".png")
        if chars:
            ui.console.print("\n  [bold]Characters:[/bold]")
            for name in chars[:MAX_LISTED_CHARACTERS]:
                ui.info(f"  - {name}")
            if len(chars) > MAX_LISTED_CHARACTERS:
                ui.info(f"  ... and {len(chars) - MAX_LISTED_CHARACTERS} more")

    worlds_dir = user_worlds_dir(config.data_root, handle)
    if worlds_dir.is_dir():
        worlds = sorted(p for p in worlds_dir.iterdir() if p.suffix == ".json")
        if worlds:
            ui.console.print("\n  [bold]Worlds (Lorebooks):[/bold]")
            for path in worlds:
                tag = " [symlink]" if link_status(path) == "symlink" else ""
                ui.info(f"  - {path.name}{tag}")
    ui.console.print()


def run(config: AdminConfig) -> None:
    action = ask_select("User information", [
        ("list", "List all users with stats"),
        ("detail", "View details for a specific user"),
    ])
    if action is CANCELLED:
        return
    if action == "list":
        list_all_users(config)
        return

    users = discover_users(config.data_root, config.exclude_dirs)
    if not users:
        ui.warn("No users found.")
        return
    handle = ask_select("Select a user", [(h, h) for h in users])
    if handle is CANCELLED:
        return
    view_user_details(config, handle)
