"""Tests for the fresh-login reset."""

from unittest.mock import patch

from rich.prompt import Confirm

from tavern_admin.models import RestartResult
from tavern_admin.operations import fresh_login
from tavern_admin.paths import cookie_secret_path


def test_clear_sessions(config):
    assert fresh_login.clear_sessions(config)
    assert not cookie_secret_path(config.data_root).exists()
    assert not fresh_login.clear_sessions(config)


def test_clear_sessions_dry_run(dry_config, console_text):
    assert fresh_login.clear_sessions(dry_config)
    assert cookie_secret_path(dry_config.data_root).exists()
    assert "[DRY RUN] Would delete" in console_text()


def test_restart_and_wait_healthy(config):
    with patch.object(fresh_login, "restart_server", return_value=RestartResult(success=True, message="ok")) as restart, \
            patch.object(fresh_login, "wait_for_health", return_value=True) as wait:
        assert fresh_login.restart_and_wait(config)
    restart.assert_called_once_with("sillytavern")
    wait.assert_called_once_with(8000)


def test_restart_failure_skips_health(config, console_text):
    with patch.object(fresh_login, "restart_server", return_value=RestartResult(success=False, message="no pm2")), \
            patch.object(fresh_login, "wait_for_health") as wait:
        assert not fresh_login.restart_and_wait(config)
    wait.assert_not_called()
    assert "Restart failed: no pm2" in console_text()


def test_restart_dry_run_does_not_call_pm2(dry_config):
    with patch.object(fresh_login, "restart_server") as restart:
        assert fresh_login.restart_and_wait(dry_config)
    restart.assert_not_called()


def test_run_deletes_before_restart(config, monkeypatch):
    order = []
    secret = cookie_secret_path(config.data_root)

    def restart(name):
        order.append(("restart", secret.exists()))
        return RestartResult(success=True, message="ok")

    monkeypatch.setattr(Confirm, "ask", lambda *a, **kw: True)
    with patch.object(fresh_login, "get_server_status", return_value=None), \
            patch.object(fresh_login, "restart_server", side_effect=restart), \
            patch.object(fresh_login, "wait_for_health", return_value=True):
        fresh_login.run(config)
    assert order == [("restart", False)]


def test_run_declined(config, monkeypatch):
    monkeypatch.setattr(Confirm, "ask", lambda *a, **kw: False)
    with patch.object(fresh_login, "get_server_status", return_value=None), \
            patch.object(fresh_login, "restart_server") as restart:
        fresh_login.run(config)
    restart.assert_not_called()
    assert cookie_secret_path(config.data_root).exists()
