"""Tests for the user information views."""

from tavern_admin.operations.user_info import disk_usage, list_all_users, view_user_details
from tavern_admin.paths import user_dir, user_worlds_dir


def test_disk_usage_ignores_symlinks(config):
    alice = user_dir(config.data_root, "alice")
    size = disk_usage(alice)
    assert size > 0
    (user_worlds_dir(config.data_root, "alice") / "Shared.json").symlink_to(config.scaffold_dir / "worlds" / "Shared.json")
    assert disk_usage(alice) == size


def test_list_all_users(config, console_text):
    list_all_users(config)
    out = console_text()
    assert "All Users (3)" in out
    for handle in ("alice", "bob", "carol"):
        assert handle in out


def test_view_user_details_tags_symlinks(config, console_text):
    (user_worlds_dir(config.data_root, "alice") / "Shared.json").symlink_to(config.scaffold_dir / "worlds" / "Shared.json")
    view_user_details(config, "alice")
    out = console_text()
    assert "Alice.png" in out
    assert "Shared.json [symlink]" in out
    assert "Existing.json [symlink]" not in out
