"""Interactive reads built on rich.prompt.

Every ask_* function returns either the operator's answer or the CANCELLED
sentinel (Ctrl+C or end of input). Callers check ``value is CANCELLED`` and
return early; cancellation is never raised as an error.

    name = ask_text("Character name:")
    if name is CANCELLED:
        return
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, Final, TypeVar

from rich.prompt import Confirm, Prompt

from tavern_admin import ui

T = TypeVar("T")

Validator = Callable[[str], "str | None"]


class Cancelled:
    """Marker for an interrupted prompt. Use the CANCELLED singleton."""

    _instance: Cancelled | None = None

    def __new__(cls) -> Cancelled:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "CANCELLED"


CANCELLED: Final = Cancelled()


def ask_text(message: str, *, default: str | None = None, validate: Validator | None = None) -> str | Cancelled:
    """Prompt for a line of text until ``validate`` returns None."""
    while True:
        try:
            if default is None:
                answer = Prompt.ask(message, console=ui.console)
            else:
                answer = Prompt.ask(message, console=ui.console, default=default)
        except (KeyboardInterrupt, EOFError):
            return CANCELLED
        problem = validate(answer) if validate else None
        if problem is None:
            return answer
        ui.error(problem)


def ask_confirm(message: str, *, default: bool = False) -> bool | Cancelled:
    try:
        return Confirm.ask(message, console=ui.console, default=default)
    except (KeyboardInterrupt, EOFError):
        return CANCELLED


def _print_options(options: Sequence[tuple[Any, str]]) -> None:
    for i, (_value, label) in enumerate(options, start=1):
        ui.console.print(f"  {i:>2}  {label}", highlight=False, markup=False)


def ask_select(message: str, options: Sequence[tuple[T, str]]) -> T | Cancelled:
    """Pick one of ``(value, label)`` options by number."""
    _print_options(options)
    choices = [str(i) for i in range(1, len(options) + 1)]
    try:
        answer = Prompt.ask(message, console=ui.console, choices=choices, show_choices=False)
    except (KeyboardInterrupt, EOFError):
        return CANCELLED
    return options[int(answer) - 1][0]


def parse_selection(answer: str, count: int) -> list[int] | None:
    """Parse "1,3-5" or "all" into zero-based indexes. None if invalid."""
    answer = answer.strip().lower()
    if answer == "all":
        return list(range(count))
    picked: list[int] = []
    for part in answer.replace(" ", "").split(","):
        if not part:
            continue
        if "-" in part:
            start, _, end = part.partition("-")
            if not (start.isdigit() and end.isdigit()):
                return None
            span = range(int(start), int(end) + 1)
        elif part.isdigit():
            span = range(int(part), int(part) + 1)
        else:
            return None
        for n in span:
            if not 1 <= n <= count:
                return None
            if n - 1 not in picked:
                picked.append(n - 1)
    return picked


def ask_multiselect(
    message: str, options: Sequence[tuple[T, str]], *, required: bool = True
) -> list[T] | Cancelled:
    """Pick several options, e.g. "1,3-5" or "all"."""
    _print_options(options)
    while True:
        try:
            answer = Prompt.ask(f"{message} (e.g. 1,3-5 or all)", console=ui.console)
        except (KeyboardInterrupt, EOFError):
            return CANCELLED
        picked = parse_selection(answer, len(options))
        if picked is None:
            ui.error("Enter numbers from the list, ranges like 2-4, or 'all'.")
            continue
        if required and not picked:
            ui.error("Select at least one option.")
            continue
        return [options[i][0] for i in picked]


def confirmed(message: str, *, default: bool = False) -> bool:
    """ask_confirm where cancelling counts as "no"."""
    answer = ask_confirm(message, default=default)
    return answer is not CANCELLED and answer


def not_blank(problem: str) -> Validator:
    """Validator rejecting empty input with ``problem``."""
    return lambda value: None if value.strip() else problem


def existing_file(value: str) -> str | None:
    if not value.strip():
        return "Path is required"
    return None if Path(value.strip()).is_file() else "File not found"
