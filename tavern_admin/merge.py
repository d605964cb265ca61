"""Edits over schema-less JSON documents (a user's settings.json).

Every public function deep-copies its input before editing and returns the
new document; the caller's object is never changed. Paths are dot-separated
("world_info.globalSelect"); numeric segments index into lists.

Named-list upsert is a composition, not a primitive: read the list at the
path, drop any record with the same name, append the new record, then write
the list back with apply_mutations. The upserted record always ends up last
and the other records keep their order.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

Mutation = tuple[str, Any]

_MISSING = object()

_NUMBER_RE = re.compile(r"-?[0-9]+(\.[0-9]+)?")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _clone(value: Any) -> Any:
    return json.loads(json.dumps(value))  # deep copy


def _split(path: str) -> list[str]:
    return [part for part in path.split(".") if part != ""]


def _child(container: Any, key: str) -> Any:
    if isinstance(container, dict):
        return container.get(key, _MISSING)
    if isinstance(container, list) and key.isdigit():
        index = int(key)
        return container[index] if index < len(container) else _MISSING
    return _MISSING


def get_path(doc: Any, path: str, default: Any = None) -> Any:
    """Value at a dot-path, or ``default`` when any segment is absent."""
    current = doc
    for key in _split(path):
        current = _child(current, key)
        if current is _MISSING:
            return default
    return current


def has_path(doc: Any, path: str) -> bool:
    return get_path(doc, path, _MISSING) is not _MISSING


def _assign(container: dict | list, key: str, value: Any) -> None:
    if isinstance(container, list):
        index = int(key)
        if index >= len(container):
            container.extend([None] * (index + 1 - len(container)))
        container[index] = value
    else:
        container[key] = value


def set_path(doc: dict, path: str, value: Any) -> dict:
    """Set a value in place, creating intermediate dicts as needed.

    No type checks: a scalar or list in the way of a deeper path is replaced
    by a dict. Returns ``doc`` for chaining.
    """
    keys = _split(path)
    if not keys:
        raise ValueError("empty settings path")
    current: dict | list = doc
    for key, next_key in zip(keys, keys[1:]):
        child = _child(current, key)
        # a list is only descended into when the next segment indexes it
        if not isinstance(child, (dict, list)) or (isinstance(child, list) and not next_key.isdigit()):
            child = {}
            _assign(current, key, child)
        current = child
    _assign(current, keys[-1], value)
    return doc


def _as_mutation(item: Mutation | Mapping[str, Any]) -> Mutation:
    if isinstance(item, Mapping):
        return item["path"], item["value"]
    return item


def apply_mutations(original: dict, mutations: Iterable[Mutation | Mapping[str, Any]]) -> dict:
    """Apply (path, value) pairs in order to a copy of ``original``."""
    result = _clone(original)
    for item in mutations:
        path, value = _as_mutation(item)
        set_path(result, path, _clone(value))
    return result


def sync_sections(target: dict, template: dict, paths: Iterable[str]) -> dict:
    """Copy the template's value at each path into a copy of ``target``.

    Paths the template does not have leave the target untouched there.
    """
    result = _clone(target)
    for path in paths:
        value = get_path(template, path, _MISSING)
        if value is not _MISSING:
            set_path(result, path, _clone(value))
    return result


def upsert_named(doc: dict, path: str, record: Mapping[str, Any], key: str = "name") -> tuple[dict, bool]:
    """Put ``record`` at the end of the list at ``path``, replacing any record
    with the same ``key`` value.

    Returns ``(new_doc, replaced)``. A missing or non-list value at the path is
    treated as an empty list.
    """
    current = get_path(doc, path, [])
    records = current if isinstance(current, list) else []
    kept = [r for r in records if not (isinstance(r, Mapping) and r.get(key) == record[key])]
    replaced = len(kept) != len(records)
    kept.append(dict(record))
    return apply_mutations(doc, [(path, kept)]), replaced


def append_unique(doc: dict, path: str, value: Any) -> tuple[dict, bool]:
    """Append ``value`` to the flat list at ``path`` if it is not already there.

    Returns ``(new_doc, added)``.
    """
    current = get_path(doc, path, [])
    items = list(current) if isinstance(current, list) else []
    added = value not in items
    if added:
        items.append(value)
    return apply_mutations(doc, [(path, items)]), added


def parse_value(text: str) -> Any:
    """Infer a JSON value from operator input.

    Order: true/false, null, integer or decimal, bracketed JSON, else the
    trimmed text. Bracketed text that is not valid JSON stays a string.
    """
    trimmed = text.strip()

    if trimmed == "true":
        return True
    if trimmed == "false":
        return False
    if trimmed == "null":
        return None

    if _NUMBER_RE.fullmatch(trimmed):
        return float(trimmed) if "." in trimmed else int(trimmed)

    if (trimmed.startswith("{") and trimmed.endswith("}")) or (trimmed.startswith("[") and trimmed.endswith("]")):
        try:
            return json.loads(trimmed, parse_constant=_reject_constant)
        except ValueError:
            pass

    return trimmed


def describe_value(value: Any) -> str:
    """Short "json (type)" rendering used when echoing parsed input."""
    kinds: Sequence[tuple[type, str]] = (
        (bool, "boolean"), (int, "number"), (float, "number"), (str, "string"),
        (list, "array"), (dict, "object"),
    )
    kind = "null"
    for cls, name in kinds:
        if isinstance(value, cls):
            kind = name
            break
    return f"{json.dumps(value)} ({kind})"
