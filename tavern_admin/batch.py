"""Per-user fan-out with failure isolation and a live progress bar.

run_batch() calls the operation once per handle, strictly in order:

    def op(handle: str) -> str | Skip:
        ...
        return SUCCESS            # or Skip("no settings.json")

    report = run_batch(users, op, "Bulk Set Key/Values")

A Skip return is recorded as skipped, any other return as succeeded, and a
raised exception as failed with its message; the loop always moves on to the
next user. Ctrl+C (or a set ``cancel`` event) stops the loop between users;
the user in flight always finishes first.
"""

from __future__ import annotations

import contextlib
import logging
import signal
import threading
from collections.abc import Callable, Sequence
from typing import Any

from rich.progress import BarColumn, MofNCompleteColumn, Progress, TaskProgressColumn, TextColumn

from tavern_admin import ui
from tavern_admin.models import BatchReport, FailedUnit, Skip, SkippedUnit

logger = logging.getLogger(__name__)

Operation = Callable[[str], Any]


def _error_message(exc: Exception) -> str:
    return str(exc) or type(exc).__name__


class _SigintTrap:
    """Turn SIGINT into ``event.set()`` for the duration of a batch."""

    def __init__(self, event: threading.Event) -> None:
        self._event = event
        self._previous: Any = None
        self._installed = False

    def __enter__(self) -> _SigintTrap:
        if threading.current_thread() is threading.main_thread():
            self._previous = signal.signal(signal.SIGINT, self._handle)
            self._installed = True
        return self

    def _handle(self, signum: int, frame: Any) -> None:
        self._event.set()

    def __exit__(self, *exc_info: Any) -> None:
        if self._installed:
            signal.signal(signal.SIGINT, self._previous)


def run_batch(
    users: Sequence[str],
    operation: Operation,
    label: str,
    *,
    cancel: threading.Event | None = None,
) -> BatchReport:
    """Run ``operation`` for every user and return the classified report."""
    report = BatchReport(label=label)

    if not users:
        ui.warn("No users selected. Skipping.")
        return report

    event = cancel if cancel is not None else threading.Event()
    guard = _SigintTrap(event) if cancel is None else contextlib.nullcontext()

    progress = Progress(
        TextColumn("  "),
        BarColumn(),
        TaskProgressColumn(),
        MofNCompleteColumn(),
        TextColumn("users | {task.fields[status]}", markup=False),
        console=ui.console,
        transient=False,
    )

    with guard, progress:
        task = progress.add_task(label, total=len(users), status="Starting...")
        for handle in users:
            if event.is_set():
                report.cancelled = True
                logger.info("%s: cancelled after %d of %d users", label, report.processed, len(users))
                break
            progress.update(task, status=handle)
            try:
                result = operation(handle)
            except Exception as e:
                report.failed.append(FailedUnit(handle=handle, error=_error_message(e)))
                logger.debug("%s: %s failed", label, handle, exc_info=True)
            else:
                if isinstance(result, Skip):
                    report.skipped.append(SkippedUnit(handle=handle, reason=result.reason))
                    logger.debug("%s: %s skipped (%s)", label, handle, result.reason)
                else:
                    report.succeeded.append(handle)
                    logger.debug("%s: %s ok", label, handle)
            progress.advance(task)
        progress.update(task, status="Cancelled" if report.cancelled else "Done")

    logger.info(
        "%s: %d succeeded, %d skipped, %d failed",
        label, len(report.succeeded), len(report.skipped), len(report.failed),
    )
    ui.print_batch_report(report)
    return report
