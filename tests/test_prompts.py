"""Tests for tavern_admin.prompts: selection parsing and cancellation."""

from rich.prompt import Confirm, Prompt

from tavern_admin.prompts import (
    CANCELLED,
    Cancelled,
    ask_multiselect,
    ask_select,
    ask_text,
    confirmed,
    existing_file,
    not_blank,
    parse_selection,
)


def _answers(monkeypatch, *values, target=Prompt):
    it = iter(values)
    monkeypatch.setattr(target, "ask", lambda *a, **kw: next(it))


def _interrupt(monkeypatch, exc=KeyboardInterrupt, target=Prompt):
    def raiser(*a, **kw):
        raise exc

    monkeypatch.setattr(target, "ask", raiser)


# ── parse_selection ──────────────────────────────────────


def test_parse_selection():
    assert parse_selection("1,3-5", 5) == [0, 2, 3, 4]
    assert parse_selection("all", 3) == [0, 1, 2]
    assert parse_selection(" 2 , 2 ", 3) == [1]
    assert parse_selection("", 3) == []


def test_parse_selection_invalid():
    assert parse_selection("0", 3) is None
    assert parse_selection("4", 3) is None
    assert parse_selection("a", 3) is None
    assert parse_selection("1-x", 3) is None


# ── Sentinel ─────────────────────────────────────────────


def test_cancelled_is_singleton():
    assert Cancelled() is CANCELLED
    assert repr(CANCELLED) == "CANCELLED"


def test_ask_text_cancel(monkeypatch):
    _interrupt(monkeypatch)
    assert ask_text("Name") is CANCELLED
    _interrupt(monkeypatch, EOFError)
    assert ask_text("Name") is CANCELLED


def test_ask_text_revalidates(monkeypatch, console_text):
    _answers(monkeypatch, "  ", "Aria")
    assert ask_text("Name", validate=not_blank("Name is required")) == "Aria"
    assert "Name is required" in console_text()


def test_ask_select_returns_value(monkeypatch):
    _answers(monkeypatch, "2")
    assert ask_select("Pick", [("a", "Alpha"), ("b", "Beta")]) == "b"


def test_ask_select_cancel(monkeypatch):
    _interrupt(monkeypatch)
    assert ask_select("Pick", [("a", "Alpha")]) is CANCELLED


def test_ask_multiselect_retries_invalid(monkeypatch):
    _answers(monkeypatch, "9", "", "1,2")
    assert ask_multiselect("Pick", [("a", "A"), ("b", "B")]) == ["a", "b"]


def test_ask_multiselect_optional_empty(monkeypatch):
    _answers(monkeypatch, "")
    assert ask_multiselect("Pick", [("a", "A")], required=False) == []


def test_confirmed_cancel_is_no(monkeypatch):
    _interrupt(monkeypatch, target=Confirm)
    assert confirmed("Sure?") is False
    _answers(monkeypatch, True, target=Confirm)
    assert confirmed("Sure?") is True


def test_existing_file(tmp_path):
    path = tmp_path / "a.json"
    path.write_text("{}", encoding="utf-8")
    assert existing_file(str(path)) is None
    assert existing_file(str(tmp_path / "b.json")) == "File not found"
    assert existing_file("  ") == "Path is required"
