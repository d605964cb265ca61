"""Tests for tavern_admin.links: symlink conflict resolution."""

import os

from tavern_admin.links import detect_registry_conflict, link_status, points_to, resolve_link


def _source(tmp_path):
    source = tmp_path / "shared" / "Lore.json"
    source.parent.mkdir()
    source.write_text("{}", encoding="utf-8")
    return source


# ── link_status ──────────────────────────────────────────


def test_link_status(tmp_path):
    source = _source(tmp_path)
    link = tmp_path / "link.json"
    assert link_status(link) == "missing"
    link.symlink_to(source)
    assert link_status(link) == "symlink"
    assert link_status(source) == "file"


def test_broken_symlink_is_symlink(tmp_path):
    link = tmp_path / "broken.json"
    link.symlink_to(tmp_path / "gone.json")
    assert link_status(link) == "symlink"


# ── resolve_link ─────────────────────────────────────────


def test_created(tmp_path):
    source = _source(tmp_path)
    target = tmp_path / "user" / "worlds" / "Lore.json"
    assert resolve_link(source, target, "skip") == "created"
    assert target.is_symlink()
    assert os.readlink(target) == str(source)


def test_already_linked_is_noop(tmp_path):
    source = _source(tmp_path)
    target = tmp_path / "Lore.json"
    target.symlink_to(source)
    for policy in ("skip", "replace-all"):
        assert resolve_link(source, target, policy) == "already-linked"
    assert points_to(target, source)


def test_relative_link_to_same_source(tmp_path):
    source = _source(tmp_path)
    target = tmp_path / "Lore.json"
    target.symlink_to(os.path.join("shared", "Lore.json"))
    assert resolve_link(source, target, "replace-all") == "already-linked"


def test_plain_file_skip_preserved(tmp_path):
    source = _source(tmp_path)
    target = tmp_path / "Lore.json"
    target.write_text("mine", encoding="utf-8")
    assert resolve_link(source, target, "skip") == "skipped"
    assert target.read_text(encoding="utf-8") == "mine"
    assert not target.is_symlink()


def test_plain_file_replaced(tmp_path):
    source = _source(tmp_path)
    target = tmp_path / "Lore.json"
    target.write_text("mine", encoding="utf-8")
    assert resolve_link(source, target, "replace-all") == "replaced"
    assert target.is_symlink()
    assert points_to(target, source)


def test_other_symlink_replaced(tmp_path):
    source = _source(tmp_path)
    other = tmp_path / "other.json"
    other.write_text("{}", encoding="utf-8")
    target = tmp_path / "Lore.json"
    target.symlink_to(other)
    assert resolve_link(source, target, "skip") == "skipped"
    assert resolve_link(source, target, "replace-all") == "replaced"
    assert points_to(target, source)
    assert other.exists()


def test_dry_run_reports_same_outcome_without_changes(tmp_path, console_text):
    source = _source(tmp_path)
    target = tmp_path / "Lore.json"
    target.write_text("mine", encoding="utf-8")
    assert resolve_link(source, target, "replace-all", dry_run=True) == "replaced"
    assert not target.is_symlink()
    missing = tmp_path / "New.json"
    assert resolve_link(source, missing, "skip", dry_run=True) == "created"
    assert not missing.exists()
    assert "[DRY RUN] Would create symlink" in console_text()


# ── Registry conflict ────────────────────────────────────


def test_detect_registry_conflict():
    entries = [{"filename": "Lore.json", "type": "world"}, {"filename": "Card.png", "type": "character"}]
    assert detect_registry_conflict(entries, "Lore.json")
    assert not detect_registry_conflict(entries, "Card.png")
    assert not detect_registry_conflict(entries, "Other.json")
