"""index.json registries (scaffold and content) keyed by filename.

An index is an ordered list of flat dicts, each with at least ``filename``
and ``type``. The host application seeds these files into every user on
restart. Reading never fails: a missing, corrupt or non-list file reads as
an empty index. All edit helpers return a new list.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONTENT_TYPES: dict[str, str] = {
    "character": "Character",
    "world": "World (Lorebook)",
    "theme": "Theme",
    "preset": "Preset",
    "template": "Template",
}


def read_index(path: Path) -> list[dict[str, Any]]:
    """Load an index. Returns [] if missing, unparseable, or not a list.

    Entries that are not JSON objects are dropped.
    """
    if not path.is_file():
        return []
    try:
        parsed = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("ignoring unreadable index %s: %s", path, e)
        return []
    if not isinstance(parsed, list):
        logger.warning("ignoring index %s: top level is not a list", path)
        return []
    entries = [e for e in parsed if isinstance(e, dict)]
    if len(entries) != len(parsed):
        logger.warning("dropping %d non-object entries from index %s", len(parsed) - len(entries), path)
    return entries


def write_index(path: Path, entries: list[dict[str, Any]]) -> None:
    """Write entries in order, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(entries, indent=2, allow_nan=False) + "\n", encoding="utf-8")


def find_entry(entries: list[dict[str, Any]], filename: str) -> dict[str, Any] | None:
    for entry in entries:
        if entry.get("filename") == filename:
            return entry
    return None


def add_entry(entries: list[dict[str, Any]], entry: dict[str, Any]) -> list[dict[str, Any]]:
    """Append ``entry`` unless an entry with the same filename exists."""
    if find_entry(entries, entry["filename"]) is not None:
        return list(entries)
    return [*entries, dict(entry)]


def remove_entries(entries: list[dict[str, Any]], filenames: Iterable[str]) -> list[dict[str, Any]]:
    """Drop every entry whose filename is listed. Unknown names are ignored."""
    doomed = set(filenames)
    return [e for e in entries if e.get("filename") not in doomed]


def update_entry(entries: list[dict[str, Any]], filename: str, updates: dict[str, Any]) -> list[dict[str, Any]]:
    """Shallow-merge ``updates`` into the entry for ``filename``. No insert."""
    return [{**e, **updates} if e.get("filename") == filename else e for e in entries]
