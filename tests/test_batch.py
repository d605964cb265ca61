"""Tests for tavern_admin.batch: failure isolation and cancellation."""

import os
import signal
import threading

from tavern_admin.batch import run_batch
from tavern_admin.models import SUCCESS, Skip


def test_empty_users(console_text):
    calls = []
    report = run_batch([], calls.append, "Nothing")
    assert calls == []
    assert report.processed == 0
    assert "No users selected" in console_text()


def test_classification_and_order():
    seen = []

    def op(handle):
        seen.append(handle)
        if handle == "b":
            return Skip(reason="no settings.json")
        if handle == "c":
            raise ValueError("boom")
        return SUCCESS

    report = run_batch(["a", "b", "c", "d"], op, "Test")
    assert seen == ["a", "b", "c", "d"]
    assert report.succeeded == ["a", "d"]
    assert [(s.handle, s.reason) for s in report.skipped] == [("b", "no settings.json")]
    assert [(f.handle, f.error) for f in report.failed] == [("c", "boom")]
    assert report.processed == 4
    assert not report.cancelled


def test_every_user_lands_in_exactly_one_bucket():
    def op(handle):
        if handle == "z":
            raise OSError("io")
        return SUCCESS if handle == "x" else Skip(reason="r")

    users = ["x", "y", "z"]
    report = run_batch(users, op, "Buckets")
    buckets = report.succeeded + [s.handle for s in report.skipped] + [f.handle for f in report.failed]
    assert sorted(buckets) == sorted(users)


def test_error_without_message_uses_class_name():
    def op(handle):
        raise KeyError

    report = run_batch(["a"], op, "Empty")
    assert report.failed[0].error == "KeyError"


def test_any_non_skip_return_is_success():
    report = run_batch(["a", "b"], lambda h: None, "None")
    assert report.succeeded == ["a", "b"]


def test_cancel_between_users():
    cancel = threading.Event()
    seen = []

    def op(handle):
        seen.append(handle)
        if handle == "b":
            cancel.set()
        return SUCCESS

    report = run_batch(["a", "b", "c"], op, "Cancel", cancel=cancel)
    assert seen == ["a", "b"]
    assert report.succeeded == ["a", "b"]
    assert report.cancelled


def test_sigint_stops_between_users():
    seen = []

    def op(handle):
        seen.append(handle)
        if handle == "b":
            os.kill(os.getpid(), signal.SIGINT)
        return SUCCESS

    report = run_batch(["a", "b", "c"], op, "Interrupt")
    assert seen == ["a", "b"]
    assert report.succeeded == ["a", "b"]
    assert report.cancelled


def test_report_printed(console_text):
    def op(handle):
        if handle == "bob":
            raise RuntimeError("disk full")
        return Skip(reason="already there") if handle == "carol" else SUCCESS

    run_batch(["alice", "bob", "carol"], op, "Push [Card]")
    out = console_text()
    assert "Push [Card]: Results" in out
    assert "Success: 1 users" in out
    assert "bob: disk full" in out
    assert "carol: already there" in out
