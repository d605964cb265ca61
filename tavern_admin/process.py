"""Process-health collaborator: pm2 restart/status and an HTTP liveness probe.

Callers finish all file mutations before asking for a restart.
"""

from __future__ import annotations

import json
import logging
import subprocess
import time

import httpx

from tavern_admin.models import RestartResult, ServerStatus

logger = logging.getLogger(__name__)


def _pm2(*args: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(["pm2", *args], capture_output=True, text=True, check=False)


def pm2_exists(name: str) -> bool:
    try:
        result = _pm2("describe", name)
    except OSError as e:
        logger.debug("pm2 not available: %s", e)
        return False
    return result.returncode == 0 and name in result.stdout


def restart_server(pm2_name: str) -> RestartResult:
    """Restart the host application through pm2."""
    if not pm2_exists(pm2_name):
        return RestartResult(success=False, message=f'pm2 process "{pm2_name}" not found')
    try:
        result = _pm2("restart", pm2_name)
    except OSError as e:
        return RestartResult(success=False, message=f"pm2 restart failed: {e}")
    if result.returncode != 0:
        detail = (result.stderr or result.stdout).strip() or f"exit status {result.returncode}"
        return RestartResult(success=False, message=f"pm2 restart failed: {detail}")
    return RestartResult(success=True, message=f'pm2 restart "{pm2_name}" executed successfully')


def check_server_health(port: int, timeout: float = 5.0) -> bool:
    """True if the server answers on localhost (2xx, 302 or 401)."""
    try:
        resp = httpx.get(f"http://localhost:{port}", timeout=timeout, follow_redirects=False)
    except httpx.HTTPError as e:
        logger.debug("health probe on port %d failed: %s", port, e)
        return False
    return resp.is_success or resp.status_code in (302, 401)


def wait_for_health(port: int, attempts: int = 5, interval: float = 3.0) -> bool:
    """Poll check_server_health until it passes or attempts run out."""
    for _ in range(attempts):
        time.sleep(interval)
        if check_server_health(port):
            return True
    return False


def get_server_status(pm2_name: str) -> ServerStatus | None:
    """Status, uptime and restart count from ``pm2 jlist``, or None."""
    try:
        result = _pm2("jlist")
        processes = json.loads(result.stdout)
    except (OSError, json.JSONDecodeError) as e:
        logger.debug("pm2 jlist unavailable: %s", e)
        return None

    proc = next((p for p in processes if isinstance(p, dict) and p.get("name") == pm2_name), None)
    if proc is None:
        return None
    env = proc.get("pm2_env") or {}
    uptime = "unknown"
    if env.get("pm_uptime"):
        uptime = f"{round((time.time() * 1000 - env['pm_uptime']) / 1000 / 60)} min"
    return ServerStatus(
        status=str(env.get("status", "unknown")),
        uptime=uptime,
        restarts=str(env.get("restart_time", "unknown")),
    )
