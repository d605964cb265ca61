import io
import json
from pathlib import Path

import pytest
from rich.console import Console

from tavern_admin import ui
from tavern_admin.models import AdminConfig


def _write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def quiet_console(monkeypatch):
    """Route all terminal output into a buffer; read it with console_text()."""
    console = Console(file=io.StringIO(), force_terminal=False, width=120)
    monkeypatch.setattr(ui, "console", console)
    return console


@pytest.fixture
def console_text(quiet_console):
    return lambda: quiet_console.file.getvalue()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("TAVERN_ADMIN_CONFIG", "TAVERN_ADMIN_DATA_ROOT", "TAVERN_ADMIN_DRY_RUN", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def st_root(tmp_path) -> Path:
    """A fresh fake SillyTavern tree.

    alice: settings, one lorebook, one card, one chat dir, content.log
    bob:   settings only
    carol: no settings.json, no content.log
    """
    root = tmp_path / "SillyTavern"
    data = root / "data"

    _write_json(data / "alice" / "settings.json", {
        "theme": "dark",
        "power_user": {"font_scale": 1, "chat_width": 50},
        "world_info": {"globalSelect": ["Existing"]},
    })
    _write_json(data / "alice" / "worlds" / "Existing.json", {"entries": {}})
    (data / "alice" / "characters").mkdir(parents=True)
    (data / "alice" / "characters" / "Alice.png").write_bytes(b"\x89PNG alice")
    (data / "alice" / "chats" / "Alice").mkdir(parents=True)
    (data / "alice" / "content.log").write_text("Seraphina.png\nDefault.json\n", encoding="utf-8")

    _write_json(data / "bob" / "settings.json", {"theme": "light"})
    (data / "bob" / "worlds").mkdir(parents=True)
    (data / "bob" / "characters").mkdir(parents=True)

    (data / "carol" / "worlds").mkdir(parents=True)

    scaffold = data / "default" / "scaffold"
    _write_json(scaffold / "index.json", [{"filename": "Shared.json", "type": "world"}])
    _write_json(scaffold / "worlds" / "Shared.json", {"entries": {"0": {"content": "shared"}}})
    _write_json(scaffold / "worlds" / "Solo.json", {"entries": {}})
    _write_json(data / "default" / "content" / "index.json", [])

    (data / "_storage").mkdir()
    (data / ".cache").mkdir()
    (data / "cookie-secret.txt").write_text("secret", encoding="utf-8")
    return root


@pytest.fixture
def config(st_root) -> AdminConfig:
    return AdminConfig(st_root=st_root, data_root=st_root / "data")


@pytest.fixture
def dry_config(config) -> AdminConfig:
    return config.model_copy(update={"dry_run": True})
