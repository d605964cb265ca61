"""Operator actions reachable from the main menu.

Each module exposes non-interactive functions that take the config and a
list of user handles and return a BatchReport, plus an interactive
``run(config)`` that gathers input and calls them.
"""
