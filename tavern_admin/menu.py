"""Interactive main menu. Each entry maps to an operation module's run()."""

from __future__ import annotations

import importlib
import logging

from tavern_admin import ui
from tavern_admin.models import AdminConfig
from tavern_admin.prompts import CANCELLED, ask_select

logger = logging.getLogger(__name__)

# value -> (label, module under tavern_admin.operations)
MODULES: dict[str, tuple[str, str]] = {
    "push-chars": ("Push Character Cards: copy cards to users", "push_characters"),
    "bulk-settings": ("Bulk Edit settings.json: edit user settings", "bulk_settings"),
    "lorebook-symlinks": ("Create Lorebook Symlinks: scaffold to users", "lorebook_links"),
    "scaffold-editor": ("Edit Scaffold index.json: manage scaffold entries", "scaffold_editor"),
    "fresh-login": ("Fresh Login Reset: clear sessions + restart", "fresh_login"),
    "user-info": ("List Users / View Details: user stats", "user_info"),
    "backup-ops": ("Backup Operations: bulk backups", "backup_ops"),
    "bulk-delete": ("Bulk Delete Content: remove files from users", "bulk_delete"),
    "reset-content-log": ("Reset Content Log: re-trigger seeding", "content_log"),
}

EXIT = "exit"


def run_module(config: AdminConfig, choice: str) -> bool:
    """Run one menu entry. False if it raised (already reported)."""
    _, module_name = MODULES[choice]
    module = importlib.import_module(f"tavern_admin.operations.{module_name}")
    try:
        module.run(config)
    except Exception as e:
        ui.error(f"Module error: {e}")
        logger.debug("module %s failed", module_name, exc_info=True)
        return False
    return True


def main_menu(config: AdminConfig) -> None:
    ui.print_banner()
    if config.dry_run:
        ui.warn("DRY RUN MODE: no files will be modified")
        ui.console.print()

    options = [(value, label) for value, (label, _) in MODULES.items()]
    options.append((EXIT, "Exit"))

    while True:
        choice = ask_select("What would you like to do?", options)
        if choice is CANCELLED or choice == EXIT:
            ui.console.print("Goodbye!", style="dim")
            return
        run_module(config, choice)
