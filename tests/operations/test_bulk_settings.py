"""Tests for bulk settings.json edits."""

import json

from tavern_admin.merge import get_path
from tavern_admin.operations.bulk_settings import (
    CHARLORE_PATH,
    add_char_lore,
    link_lorebook,
    read_settings,
    set_key_values,
    sync_from_template,
)
from tavern_admin.paths import user_settings_path, user_snapshot_dir

USERS = ["alice", "bob", "carol"]


def _settings(config, handle):
    return json.loads(user_settings_path(config.data_root, handle).read_text(encoding="utf-8"))


def _snapshots(config, handle):
    directory = user_snapshot_dir(config.data_root, handle)
    return sorted(directory.iterdir()) if directory.is_dir() else []


# ── Set keys ─────────────────────────────────────────────


def test_set_keys(config):
    report = set_key_values(config, USERS, [("power_user.font_scale", 1.5), ("new.key", True)])
    assert report.succeeded == ["alice", "bob"]
    assert [(s.handle, s.reason) for s in report.skipped] == [("carol", "no settings.json")]
    alice = _settings(config, "alice")
    assert alice["power_user"] == {"font_scale": 1.5, "chat_width": 50}
    assert alice["new"] == {"key": True}
    assert alice["theme"] == "dark"


def test_snapshot_holds_previous_content(config):
    before = user_settings_path(config.data_root, "alice").read_bytes()
    set_key_values(config, ["alice"], [("theme", "light")])
    snaps = _snapshots(config, "alice")
    assert len(snaps) == 1
    assert snaps[0].read_bytes() == before


def test_skipped_user_has_no_snapshot(config):
    set_key_values(config, ["carol"], [("theme", "light")])
    assert _snapshots(config, "carol") == []
    assert not user_settings_path(config.data_root, "carol").exists()


def test_corrupt_settings_fails_only_that_user(config):
    user_settings_path(config.data_root, "bob").write_text("{broken", encoding="utf-8")
    report = set_key_values(config, ["alice", "bob"], [("theme", "x")])
    assert report.succeeded == ["alice"]
    assert [f.handle for f in report.failed] == ["bob"]
    assert user_settings_path(config.data_root, "bob").read_text(encoding="utf-8") == "{broken"


def test_non_object_settings_fails(config):
    user_settings_path(config.data_root, "bob").write_text("[1, 2]", encoding="utf-8")
    report = set_key_values(config, ["bob"], [("theme", "x")])
    assert report.failed[0].error == "settings.json is not a JSON object"


def test_non_finite_value_fails_without_writing(config):
    before = user_settings_path(config.data_root, "alice").read_text(encoding="utf-8")
    report = set_key_values(config, ["alice"], [("power_user.font_scale", float("inf"))])
    assert [f.handle for f in report.failed] == ["alice"]
    assert user_settings_path(config.data_root, "alice").read_text(encoding="utf-8") == before


def test_dry_run_touches_nothing(dry_config, console_text):
    before = user_settings_path(dry_config.data_root, "alice").read_bytes()
    report = set_key_values(dry_config, ["alice"], [("theme", "light")])
    assert report.succeeded == ["alice"]
    assert user_settings_path(dry_config.data_root, "alice").read_bytes() == before
    assert _snapshots(dry_config, "alice") == []
    assert "[DRY RUN] Would set theme" in console_text()


def test_set_keys_idempotent(config):
    mutations = [("world_info.depth", 4)]
    set_key_values(config, ["alice"], mutations)
    once = _settings(config, "alice")
    set_key_values(config, ["alice"], mutations)
    assert _settings(config, "alice") == once


# ── Template sync ────────────────────────────────────────


def test_sync_from_template(config):
    template = {"theme": "golden", "power_user": {"font_scale": 2}, "ignored": 1}
    sync_from_template(config, ["alice", "bob"], template, ["power_user", "missing"])
    assert _settings(config, "alice")["power_user"] == {"font_scale": 2}
    assert _settings(config, "alice")["theme"] == "dark"
    assert _settings(config, "bob") == {"theme": "light", "power_user": {"font_scale": 2}}


# ── Lorebooks ────────────────────────────────────────────


def test_link_lorebook_appends_once(config):
    link_lorebook(config, ["alice", "bob"], " Shared ")
    link_lorebook(config, ["alice", "bob"], "Shared")
    assert get_path(_settings(config, "alice"), "world_info.globalSelect") == ["Existing", "Shared"]
    assert get_path(_settings(config, "bob"), "world_info.globalSelect") == ["Shared"]


def test_add_char_lore_upsert(config):
    add_char_lore(config, ["alice"], "Aria", ["aria.json"])
    add_char_lore(config, ["alice"], "Bram", ["bram.json"])
    add_char_lore(config, ["alice"], "Aria", ["aria.json", "extra.json"])
    entries = get_path(_settings(config, "alice"), CHARLORE_PATH)
    assert entries == [
        {"name": "Bram", "extraBooks": ["bram.json"]},
        {"name": "Aria", "extraBooks": ["aria.json", "extra.json"]},
    ]


def test_read_settings_missing(tmp_path):
    assert read_settings(tmp_path / "settings.json") is None
