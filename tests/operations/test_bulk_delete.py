"""Tests for bulk content deletion."""

from tavern_admin.operations.bulk_delete import count_present, delete_content
from tavern_admin.paths import user_characters_dir, user_snapshot_dir, user_worlds_dir

USERS = ["alice", "bob", "carol"]


def test_delete_with_backup(config):
    card = user_characters_dir(config.data_root, "alice") / "Alice.png"
    report = delete_content(config, USERS, "character", "Alice.png")
    assert report.succeeded == ["alice"]
    assert [s.reason for s in report.skipped] == ["file not found", "file not found"]
    assert not card.exists()
    snaps = list(user_snapshot_dir(config.data_root, "alice").iterdir())
    assert [s.read_bytes() for s in snaps] == [b"\x89PNG alice"]


def test_delete_without_backup(config):
    delete_content(config, ["alice"], "world", "Existing.json", backup_first=False)
    assert not (user_worlds_dir(config.data_root, "alice") / "Existing.json").exists()
    assert not user_snapshot_dir(config.data_root, "alice").exists()


def test_delete_symlink_keeps_source(config):
    source = config.scaffold_dir / "worlds" / "Shared.json"
    link = user_worlds_dir(config.data_root, "bob") / "Shared.json"
    link.symlink_to(source)
    assert count_present(config, USERS, "world", "Shared.json") == 1
    report = delete_content(config, ["bob"], "world", "Shared.json", backup_first=False)
    assert report.succeeded == ["bob"]
    assert not link.is_symlink()
    assert source.exists()


def test_delete_dry_run(dry_config):
    report = delete_content(dry_config, ["alice"], "character", " Alice.png ")
    assert report.succeeded == ["alice"]
    assert (user_characters_dir(dry_config.data_root, "alice") / "Alice.png").exists()
    assert not user_snapshot_dir(dry_config.data_root, "alice").exists()
