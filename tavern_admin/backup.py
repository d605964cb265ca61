"""Snapshots taken before any destructive write.

Two areas:
  <data_root>/<handle>/backups/admin-snapshots/   per-user (owner-scoped)
  <backup_root>/<label>-<timestamp>/              centralized, one per run

A snapshot is a byte-for-byte copy named ``<name>.<timestamp>.bak``. Snapshots
are write-once; nothing in this package reads them back. A missing source is
not an error: there is nothing to protect, so no directory is created and
None is returned. In dry-run mode nothing touches the disk and None is
returned after printing what would have happened.
"""

from __future__ import annotations

import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path

from tavern_admin import ui
from tavern_admin.paths import user_snapshot_dir

logger = logging.getLogger(__name__)

SNAPSHOT_SUFFIX = "bak"


def snapshot_timestamp(now: datetime | None = None) -> str:
    """Sortable, filename-safe UTC timestamp, e.g. "2025-01-15-143022"."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%d-%H%M%S")


def _free_snapshot_path(backup_dir: Path, name: str, stamp: str) -> Path:
    path = backup_dir / f"{name}.{stamp}.{SNAPSHOT_SUFFIX}"
    counter = 1
    while path.exists():
        path = backup_dir / f"{name}.{stamp}-{counter}.{SNAPSHOT_SUFFIX}"
        counter += 1
    return path


def backup_file(path: Path, backup_dir: Path) -> Path | None:
    """Copy ``path`` into ``backup_dir``. Returns the snapshot path, or None if
    the source does not exist.

    Existing snapshots are never overwritten; a second snapshot within the same
    second gets a -1, -2, ... counter.
    """
    if not path.exists():
        return None
    backup_dir.mkdir(parents=True, exist_ok=True)
    target = _free_snapshot_path(backup_dir, path.name, snapshot_timestamp())
    shutil.copy2(path, target)
    logger.debug("snapshot %s -> %s", path, target)
    return target


def backup_user_file(data_root: Path, handle: str, relative_path: str | Path, dry_run: bool = False) -> Path | None:
    """Snapshot a file of one user into that user's own snapshot area."""
    source = data_root / handle / relative_path
    backup_dir = user_snapshot_dir(data_root, handle)
    if not source.exists():
        return None
    if dry_run:
        ui.info(f"[DRY RUN] Would backup {source} -> {backup_dir}/")
        return None
    return backup_file(source, backup_dir)


def admin_run_dir(backup_root: Path, label: str) -> Path:
    """Centralized directory for one labelled run. Not created here."""
    return backup_root / f"{label}-{snapshot_timestamp()}"


def backup_to_admin(backup_root: Path, path: Path, label: str, dry_run: bool = False) -> Path | None:
    """Snapshot a shared (non-per-user) file into a fresh centralized directory."""
    if not path.exists():
        return None
    run_dir = admin_run_dir(backup_root, label)
    if dry_run:
        ui.info(f"[DRY RUN] Would backup {path} -> {run_dir}/")
        return None
    return backup_file(path, run_dir)


def copy_into_run(source: Path, run_dir: Path, handle: str, dry_run: bool = False) -> Path | None:
    """Copy one user's file to ``<run_dir>/<handle>/<filename>``.

    Used by whole-fleet backups so a run's copies sit together under one
    directory with their original names.
    """
    if not source.exists():
        return None
    target = run_dir / handle / source.name
    if dry_run:
        ui.info(f"[DRY RUN] Would backup {source} -> {target}")
        return None
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, target)
    logger.debug("run copy %s -> %s", source, target)
    return target
