"""Command line entry point.

With no subcommand the interactive menu starts. The subcommands run one
batch operation headlessly, so a fleet change can be scripted:

    tavern-admin --dry-run set-keys --all world_info.depth=4
    tavern-admin charlore --users alice,bob "Aria" aria-lore.json
    tavern-admin link-lorebook --all /srv/lore/shared.json --replace

The exit status is 1 when configuration or discovery fails, or when any
user failed.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path

from rich.logging import RichHandler

from tavern_admin import __version__, ui
from tavern_admin.config import ConfigError, load_config
from tavern_admin.merge import Mutation, parse_value
from tavern_admin.models import AdminConfig, BatchReport
from tavern_admin.prompts import CANCELLED
from tavern_admin.users import DiscoveryError, discover_users

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    level_name = "DEBUG" if verbose else os.getenv("LOG_LEVEL", "WARNING").upper()
    level = getattr(logging, level_name, logging.WARNING)
    handler = RichHandler(console=ui.console, show_path=False)
    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=[handler], force=True)


def parse_assignment(text: str) -> Mutation:
    """``world_info.depth=4`` -> ("world_info.depth", 4)."""
    path, sep, raw = text.partition("=")
    if not sep or not path.strip():
        raise argparse.ArgumentTypeError(f'expected PATH=VALUE, got "{text}"')
    return path.strip(), parse_value(raw)


def resolve_users(config: AdminConfig, args: argparse.Namespace) -> list[str]:
    """Handles named by --users / --all, checked against the data directory."""
    known = discover_users(config.data_root, config.exclude_dirs)
    if args.all:
        if not known:
            raise DiscoveryError("No users found in the data directory.")
        return known
    wanted = [h.strip() for h in args.users.split(",") if h.strip()]
    unknown = [h for h in wanted if h not in known]
    if unknown:
        raise DiscoveryError(f"Unknown user(s): {', '.join(unknown)}")
    return wanted


def _cmd_users(config: AdminConfig, args: argparse.Namespace) -> BatchReport | None:
    for handle in discover_users(config.data_root, config.exclude_dirs):
        ui.console.print(handle, markup=False, highlight=False)
    return None


def _cmd_set_keys(config: AdminConfig, args: argparse.Namespace) -> BatchReport:
    from tavern_admin.operations.bulk_settings import set_key_values
    return set_key_values(config, resolve_users(config, args), args.assignments)


def _cmd_sync_template(config: AdminConfig, args: argparse.Namespace) -> BatchReport:
    from tavern_admin.operations.bulk_settings import read_settings, sync_from_template
    try:
        template = read_settings(args.template)
    except ValueError as e:
        raise ConfigError(f"Failed to parse template {args.template}: {e}") from e
    if template is None:
        raise ConfigError(f"Template not found: {args.template}")
    return sync_from_template(config, resolve_users(config, args), template, args.keys)


def _cmd_charlore(config: AdminConfig, args: argparse.Namespace) -> BatchReport:
    from tavern_admin.operations.bulk_settings import add_char_lore
    return add_char_lore(config, resolve_users(config, args), args.name, args.books)


def _cmd_link_lorebook(config: AdminConfig, args: argparse.Namespace) -> BatchReport:
    from tavern_admin.operations.lorebook_links import link_for_users, scaffold_conflicts
    scaffold_conflicts(config, [args.source.name])
    policy = "replace-all" if args.replace else "skip"
    return link_for_users(config, resolve_users(config, args), args.source, policy)


def _cmd_backup(config: AdminConfig, args: argparse.Namespace) -> BatchReport:
    from tavern_admin.operations.backup_ops import backup_for_users
    report, _ = backup_for_users(config, resolve_users(config, args), args.filename)
    return report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tavern-admin", description="SillyTavern multi-user admin tool")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, default=None,
                        help="Path to config.json (default: $TAVERN_ADMIN_CONFIG or ./config.json)")
    parser.add_argument("--dry-run", action="store_true",
                        help="Preview changes without modifying any file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    targets = argparse.ArgumentParser(add_help=False)
    group = targets.add_mutually_exclusive_group(required=True)
    group.add_argument("--users", help="Comma-separated user handles")
    group.add_argument("--all", action="store_true", help="Every discovered user")

    sub = parser.add_subparsers(dest="command")

    p = sub.add_parser("users", help="List discovered user handles")
    p.set_defaults(func=_cmd_users)

    p = sub.add_parser("set-keys", parents=[targets], help="Set dot-path keys in settings.json")
    p.add_argument("assignments", nargs="+", type=parse_assignment, metavar="PATH=VALUE")
    p.set_defaults(func=_cmd_set_keys)

    p = sub.add_parser("sync-template", parents=[targets], help="Copy sections from a template settings.json")
    p.add_argument("template", type=Path, metavar="FILE")
    p.add_argument("keys", nargs="+", metavar="KEY")
    p.set_defaults(func=_cmd_sync_template)

    p = sub.add_parser("charlore", parents=[targets], help="Upsert a charLore entry")
    p.add_argument("name", metavar="NAME")
    p.add_argument("books", nargs="+", metavar="BOOK")
    p.set_defaults(func=_cmd_charlore)

    p = sub.add_parser("link-lorebook", parents=[targets], help="Symlink a lorebook into users' worlds/")
    p.add_argument("source", type=Path, metavar="SOURCE")
    p.add_argument("--replace", action="store_true", help="Replace existing files (snapshotted first)")
    p.set_defaults(func=_cmd_link_lorebook)

    p = sub.add_parser("backup", parents=[targets], help="Back up one file from every user")
    p.add_argument("filename", metavar="FILENAME")
    p.set_defaults(func=_cmd_backup)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = load_config(args.config, interactive=args.command is None)
        if config is CANCELLED:
            return 0
        if args.dry_run:
            config = config.model_copy(update={"dry_run": True})

        if args.command is None:
            from tavern_admin.menu import main_menu
            main_menu(config)
            return 0

        if config.dry_run:
            ui.warn("DRY RUN MODE: no files will be modified")
        report = args.func(config, args)
    except (ConfigError, DiscoveryError) as e:
        ui.error(str(e))
        logger.debug("aborted", exc_info=True)
        return 1

    if report is not None and report.failed:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
