"""Shared lorebooks by symlink, and the seeding conflict they can hit.

A lorebook in scaffold/worlds/ can be shared with many users by placing an
absolute symlink at <user>/worlds/<file>. The host application also seeds
files listed in scaffold/index.json by copying them into each user on
restart; a "world" entry for the same filename will overwrite the symlink
with a plain copy and silently break the share. detect_registry_conflict()
flags that case so the operator can be warned. It does not block linking.

resolve_link() outcomes for one target:
  nothing there               → created
  symlink to the same source  → already-linked (no change)
  other symlink / plain file  → skipped (policy "skip") or replaced
                                (policy "replace-all")

The resolver never backs anything up. Callers snapshot a plain file before
calling with "replace-all". In dry-run mode it reports the action and
returns the same outcome the real run would, without touching the disk.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Literal

from tavern_admin import ui
from tavern_admin.models import LinkOutcome, LinkPolicy

logger = logging.getLogger(__name__)

TargetState = Literal["missing", "symlink", "file"]


def link_status(path: Path) -> TargetState:
    """What occupies ``path``. Broken symlinks count as symlinks."""
    if path.is_symlink():
        return "symlink"
    if path.exists():
        return "file"
    return "missing"


def _link_destination(link: Path) -> Path:
    raw = Path(os.readlink(link))
    if not raw.is_absolute():
        raw = link.parent / raw
    return Path(os.path.abspath(raw))


def points_to(link: Path, source: Path) -> bool:
    """True if ``link`` is a symlink whose destination is ``source``."""
    if not link.is_symlink():
        return False
    destination = _link_destination(link)
    source = Path(os.path.abspath(source))
    if destination == source:
        return True
    # same file reached through a different spelling (e.g. symlinked parent)
    return destination.exists() and source.exists() and destination.resolve() == source.resolve()


def resolve_link(source: Path, target: Path, policy: LinkPolicy, dry_run: bool = False) -> LinkOutcome:
    """Make ``target`` an absolute symlink to ``source`` under ``policy``."""
    source = Path(os.path.abspath(source))
    state = link_status(target)
    outcome: LinkOutcome = "created"

    if state == "symlink" and points_to(target, source):
        return "already-linked"

    if state != "missing":
        if policy == "skip":
            return "skipped"
        outcome = "replaced"
        if dry_run:
            if state == "symlink":
                ui.info(f"[DRY RUN] Would replace symlink {target}: {os.readlink(target)} -> {source}")
            else:
                ui.info(f"[DRY RUN] Would replace file {target} with symlink -> {source}")
            return outcome
        target.unlink()
        logger.debug("removed existing %s at %s", state, target)

    if dry_run:
        ui.info(f"[DRY RUN] Would create symlink: {target} -> {source}")
        return outcome

    target.parent.mkdir(parents=True, exist_ok=True)
    target.symlink_to(source)
    logger.debug("linked %s -> %s (%s)", target, source, outcome)
    return outcome


def detect_registry_conflict(entries: list[dict[str, Any]], filename: str, seeded_type: str = "world") -> bool:
    """True if the registry would seed a copy of ``filename`` over a symlink."""
    return any(e.get("filename") == filename and e.get("type") == seeded_type for e in entries)
