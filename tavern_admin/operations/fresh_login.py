"""Invalidate every session: delete cookie-secret.txt, then restart via pm2.

The file deletion always completes before the restart is requested.
"""

from __future__ import annotations

from tavern_admin import ui
from tavern_admin.models import AdminConfig
from tavern_admin.paths import cookie_secret_path
from tavern_admin.process import get_server_status, restart_server, wait_for_health
from tavern_admin.prompts import confirmed


def clear_sessions(config: AdminConfig) -> bool:
    """Delete cookie-secret.txt. Returns True if a file was (or would be) removed."""
    secret = cookie_secret_path(config.data_root)
    if not secret.exists():
        return False
    if config.dry_run:
        ui.info(f"[DRY RUN] Would delete {secret}")
        return True
    secret.unlink()
    ui.success("Deleted cookie-secret.txt")
    return True


def restart_and_wait(config: AdminConfig) -> bool:
    """Restart the server and poll until it answers. True when healthy."""
    if config.dry_run:
        ui.info(f"[DRY RUN] Would run: pm2 restart {config.pm2_name}")
        return True

    with ui.console.status("Restarting SillyTavern via pm2..."):
        result = restart_server(config.pm2_name)
        if not result.success:
            ui.error(f"Restart failed: {result.message}")
            return False
        healthy = wait_for_health(config.server_port)

    if healthy:
        ui.success("Server restarted successfully and is responding.")
    else:
        ui.warn("Server restarted but is not yet responding. It may still be starting up.")
        ui.info(f"Check manually: pm2 logs {config.pm2_name}")
    return healthy


def run(config: AdminConfig) -> None:
    status = get_server_status(config.pm2_name)
    if status:
        ui.info(f"Server status: {status.status} | uptime: {status.uptime} | restarts: {status.restarts}")

    if not cookie_secret_path(config.data_root).exists():
        ui.info("cookie-secret.txt does not exist. Sessions are already cleared.")
        if not confirmed("Restart the server anyway?"):
            return
    else:
        if not confirmed(
            "This will delete cookie-secret.txt and restart SillyTavern. "
            "ALL active user sessions will be invalidated (users must log in again). Continue?"
        ):
            return
        try:
            clear_sessions(config)
        except OSError as e:
            ui.error(f"Failed to delete cookie-secret.txt: {e}")
            return

    restart_and_wait(config)
