#!/usr/bin/env python3
"""
notifierctl - EventCatalog change notifier CLI

Commands:
- notifierctl detect     Detect catalog changes and notify subscribers
- notifierctl version    Version info
"""

import argparse
import asyncio
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from catalog_notifier import DEFAULT_CONFIG, __version__
from catalog_notifier.catalog import FileSystemCatalog
from catalog_notifier.core.config import get_settings
from catalog_notifier.core.errors import NotifierError
from catalog_notifier.core.models import LifecycleStage
from catalog_notifier.core.notifier_config import load_config, validate_catalog_directory
from catalog_notifier.detectors import aggregate, build_default_detectors
from catalog_notifier.notifications import (
    DeliveryRecord,
    NotificationDispatcher,
    filter_notifications,
)
from catalog_notifier.vcs import GitRepository

logger = logging.getLogger(__name__)


class Colors:
    """ANSI color codes for terminal output."""

    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"
    RESET = "\033[0m"
    BOLD = "\033[1m"


def colorize(text: str, color: str) -> str:
    """Colorize text if stdout is a TTY."""
    if sys.stdout.isatty():
        return f"{color}{text}{Colors.RESET}"
    return text


def print_info(message: str) -> None:
    print(colorize("ℹ", Colors.BLUE), message)


def print_success(message: str) -> None:
    print(colorize("✓", Colors.GREEN), message)


def print_warning(message: str) -> None:
    print(colorize("⚠", Colors.YELLOW), message)


def print_error(message: str) -> None:
    print(colorize("✗", Colors.RED), message, file=sys.stderr)


def print_error_details(title: str, message: str = "", suggestions: Optional[List[str]] = None) -> None:
    """Print a fatal error with its explanation and remediation hints."""
    print_error(title)
    if message:
        print(colorize(message, Colors.GRAY), file=sys.stderr)
    if suggestions:
        print(file=sys.stderr)
        for suggestion in suggestions:
            print(colorize(suggestion, Colors.GRAY), file=sys.stderr)


def print_preview(record: DeliveryRecord) -> None:
    """Show the exact payload and headers a dry run would have sent."""
    print(
        colorize("[DRY RUN]", Colors.YELLOW),
        f"Would send notification to {colorize(record.endpoint, Colors.CYAN)} ({record.subscriber}):",
    )
    print(colorize(json.dumps(record.payload, indent=2, ensure_ascii=False), Colors.GRAY))
    if record.headers:
        print(
            colorize("[DRY RUN]", Colors.YELLOW),
            "Headers:",
            colorize(json.dumps(record.headers, indent=2), Colors.GRAY),
        )


def configure_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else get_settings().log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


async def cmd_detect(args) -> int:
    """
    Detect catalog changes in a commit range and notify subscribers.

    Returns:
        Exit code (0 on success or nothing to do, 1 on failure)
    """
    settings = get_settings()

    try:
        catalog_path = Path(args.catalog).resolve()
        logger.debug(f"Resolved catalog path: {catalog_path}")
        validate_catalog_directory(catalog_path)

        config_path = catalog_path / (args.config or settings.config_file)
        config = load_config(config_path)

        commit_range = args.commit_range
        print_info(f"Analyzing changes in commit range: {colorize(commit_range, Colors.CYAN)}")

        repo = GitRepository(catalog_path)
        changed_files = repo.changed_files(commit_range)
        logger.debug(f"Found {len(changed_files)} changed file(s)")

        if not changed_files:
            print_info("No files changed in the specified commit range")
            print_success("Nothing to process")
            return 0

        print_info(f"Processing {len(changed_files)} changed file(s)...")
        catalog = FileSystemCatalog(catalog_path)
        detectors = build_default_detectors(catalog, repo, environment=settings.environment)
        notifications = aggregate(detectors, str(catalog_path), changed_files, commit_range)
        logger.debug(f"Generated {len(notifications)} raw notification(s)")

        filtered = filter_notifications(config, notifications)
        print_info(f"Found {len(filtered)} notification(s) to send after filtering")

        if not filtered:
            print_info("No notifications match your configuration")
            print_success("Nothing to send")
            return 0

        if args.dry_run:
            print_warning("DRY RUN MODE - No notifications will be sent")

        dispatcher = NotificationDispatcher(config, settings=settings)
        records = await dispatcher.dispatch(
            filtered,
            preview=args.dry_run,
            stage=LifecycleStage(args.lifecycle),
            action_url=args.action_url,
        )

        for record in records:
            if args.dry_run:
                print_preview(record)
            else:
                print_success(f"Notification sent successfully to {colorize(record.endpoint, Colors.CYAN)}")

        mode = "previewed" if args.dry_run else "sent"
        print_success(f"Successfully {mode} {len(records)} message(s) for {len(filtered)} notification(s)")
        return 0

    except NotifierError as e:
        print_error_details(e.title, e.message, e.suggestions)
        if args.verbose:
            traceback.print_exc()
        return 1
    except Exception as e:
        print_error("An unexpected error occurred")
        print(colorize(f"Error details: {e}", Colors.GRAY), file=sys.stderr)
        if args.verbose:
            print(file=sys.stderr)
            print(colorize("Stack trace:", Colors.RED), file=sys.stderr)
            traceback.print_exc()
        return 1


def cmd_version(args) -> int:
    """
    Print version information.

    Returns:
        Exit code (always 0)
    """
    print(f"notifierctl version {__version__}")
    print("EventCatalog Notifier - consumer and schema change notifications")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for notifierctl."""
    parser = argparse.ArgumentParser(
        prog="notifierctl",
        description="Detect EventCatalog consumer and schema changes and send notifications",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  notifierctl detect --dry-run                        # Preview notifications
  notifierctl detect --catalog ./catalog              # Detect and send
  notifierctl detect --commit-range main...HEAD --lifecycle draft \\
      --action-url https://github.com/org/repo/pull/42

Environment variables:
  NOTIFIER_LOG_LEVEL                 # Logging level (default: INFO)
  NOTIFIER_CONFIG_FILE               # Config file name (default: eventcatalog.notifier.yml)
  NOTIFIER_HTTP_TIMEOUT              # Webhook timeout in seconds (default: 10)
  NOTIFIER_ENVIRONMENT               # Environment label added to notifications
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # detect command
    detect_parser = subparsers.add_parser(
        "detect",
        help="Detect changes in the catalog and send notifications"
    )
    detect_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview notifications without sending them"
    )
    detect_parser.add_argument(
        "--config",
        default=None,
        help=f"Path to the notifier config, relative to the catalog (default: {DEFAULT_CONFIG['config_file']})"
    )
    detect_parser.add_argument(
        "--catalog",
        default="./",
        help="Path to the EventCatalog directory (default: ./)"
    )
    detect_parser.add_argument(
        "--commit-range",
        default=DEFAULT_CONFIG["commit_range"],
        help=f"Git commit range to compare (default: {DEFAULT_CONFIG['commit_range']})"
    )
    detect_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging for debugging"
    )
    detect_parser.add_argument(
        "--lifecycle",
        choices=[stage.value for stage in LifecycleStage],
        default=DEFAULT_CONFIG["lifecycle"],
        help="Lifecycle stage of the change: draft (proposed) or active (default: active)"
    )
    detect_parser.add_argument(
        "--action-url",
        default=None,
        help="Link to the change (e.g. pull request) included in messages"
    )

    # version command
    subparsers.add_parser(
        "version",
        help="Show version information"
    )

    return parser


def main(argv=None):
    """Main entry point for notifierctl CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    # Dispatch to command handlers
    if args.command == "detect":
        try:
            configure_logging(args.verbose)
        except NotifierError as e:
            print_error_details(e.title, e.message, e.suggestions)
            return 1
        return asyncio.run(cmd_detect(args))
    elif args.command == "version":
        return cmd_version(args)
    else:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
