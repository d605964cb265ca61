"""Share one lorebook file with many users through absolute symlinks.

Each selected user gets <user>/worlds/<file> pointing at the source. With the
"replace-all" policy a plain file already at the target is snapshotted into
the user's snapshot area before it is replaced. Users already linked to the
same source, and users whose existing file is kept under "skip", are
reported as skipped.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path

from tavern_admin import ui
from tavern_admin.backup import backup_user_file
from tavern_admin.batch import run_batch
from tavern_admin.content_index import read_index
from tavern_admin.links import detect_registry_conflict, link_status, resolve_link
from tavern_admin.models import SUCCESS, AdminConfig, BatchReport, LinkPolicy, Skip
from tavern_admin.paths import scaffold_index_path, scaffold_worlds_dir, user_worlds_dir
from tavern_admin.prompts import CANCELLED, ask_multiselect, ask_select, ask_text, confirmed, existing_file
from tavern_admin.users import select_users

_SKIP_REASONS = {
    "already-linked": "already symlinked to same source",
    "skipped": "existing file preserved",
}


def list_scaffold_lorebooks(scaffold_dir: Path) -> list[str]:
    """Lorebook filenames in scaffold/worlds/, sorted."""
    worlds = scaffold_worlds_dir(scaffold_dir)
    if not worlds.is_dir():
        return []
    return sorted(p.name for p in worlds.iterdir() if p.suffix == ".json")


def scaffold_conflicts(config: AdminConfig, filenames: Sequence[str]) -> list[str]:
    """Warn about lorebooks the scaffold index would also seed as copies."""
    entries = read_index(scaffold_index_path(config.scaffold_dir))
    conflicts = [f for f in filenames if detect_registry_conflict(entries, f)]
    for filename in conflicts:
        ui.warn(
            f'"{filename}" is also listed in scaffold/index.json as type "world".\n'
            "    The SillyTavern seeder may overwrite symlinks with copies on restart.\n"
            "    Consider removing it from the scaffold index to avoid conflicts."
        )
    return conflicts


def link_for_users(config: AdminConfig, users: Sequence[str], source: Path, policy: LinkPolicy) -> BatchReport:
    """Symlink ``source`` into every user's worlds/ directory."""
    source = Path(os.path.abspath(source))
    filename = source.name

    def op(handle: str) -> str | Skip:
        if not source.is_file():
            return Skip(reason=f"source {source} not found")
        target = user_worlds_dir(config.data_root, handle) / filename

        if policy == "replace-all" and link_status(target) == "file":
            backup_user_file(config.data_root, handle, Path("worlds") / filename, dry_run=config.dry_run)

        outcome = resolve_link(source, target, policy, dry_run=config.dry_run)
        if outcome in _SKIP_REASONS:
            return Skip(reason=_SKIP_REASONS[outcome])
        return SUCCESS

    return run_batch(users, op, f"Symlink {filename}")


def _ask_custom_path() -> list[Path] | None:
    path = ask_text("Absolute path to the lorebook JSON file", validate=existing_file)
    if path is CANCELLED:
        return None
    return [Path(os.path.abspath(path.strip()))]


def run(config: AdminConfig) -> None:
    worlds_dir = scaffold_worlds_dir(config.scaffold_dir)
    available = list_scaffold_lorebooks(config.scaffold_dir)

    sources: list[Path] | None
    if available:
        choice = ask_select("Select source lorebook(s)", [
            ("pick", "Pick from scaffold/worlds/"),
            ("custom", "Enter a custom path"),
        ])
        if choice is CANCELLED:
            return
        if choice == "pick":
            picked = ask_multiselect("Lorebook(s) to symlink", [(f, f) for f in available])
            if picked is CANCELLED:
                return
            sources = [Path(os.path.abspath(worlds_dir / f)) for f in picked]
        else:
            sources = _ask_custom_path()
    else:
        ui.info(f"No lorebooks found in {worlds_dir}. Enter a path manually.")
        sources = _ask_custom_path()
    if not sources:
        return

    scaffold_conflicts(config, [s.name for s in sources])

    users = select_users(config)
    if users is CANCELLED or not users:
        return

    policy = ask_select("If a file already exists in a user's worlds/ directory", [
        ("replace-all", "Replace all (backup originals first)"),
        ("skip", "Skip: keep existing files"),
    ])
    if policy is CANCELLED:
        return

    if not confirmed(f"Create symlinks for {len(sources)} lorebook(s) across {len(users)} user(s)?"):
        return

    for source in sources:
        ui.print_header(f"Symlinking: {source.name}")
        link_for_users(config, users, source, policy)
