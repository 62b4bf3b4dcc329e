#!/usr/bin/env python3
"""
CalmDrafts command line entry point
Checks Gmail drafts once or on an interval and cleans up old empty drafts
"""

import argparse
import asyncio
import logging
import os
from datetime import timedelta
from typing import Dict, List, Optional

from dotenv import load_dotenv
from rich.console import Console

from calmdrafts import APP_NAME
from calmdrafts.checker import DraftChecker
from calmdrafts.config import AppConfig, format_duration, load_config, save_config
from calmdrafts.errors import AuthenticationError, ConfigError, DraftFetchError, NotificationError
from calmdrafts.gmail_service import GmailService
from calmdrafts.models import CheckConfig
from calmdrafts.notifier import Notifier
from calmdrafts.scheduler import CheckScheduler

# Load environment variables
load_dotenv()

# Configure logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)

console = Console()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Watch Gmail drafts and clean up old empty ones')

    parser.add_argument('--config', type=str, default=os.getenv('CALMDRAFTS_CONFIG', 'config.json'),
                        help='Path to configuration file (default: config.json)')
    parser.add_argument('--check', action='store_true', help='Run a single check and exit')
    parser.add_argument('--dry-run', action='store_true', help='Report old empty drafts without deleting them')
    parser.add_argument('--no-dry-run', dest='dry_run', action='store_false', help='Actually delete old empty drafts')
    parser.add_argument('--write-config', action='store_true',
                        help='Write the effective configuration to --config and exit')
    parser.set_defaults(dry_run=None)

    return parser.parse_args(argv)


def resolve_dry_run(flag: Optional[bool]) -> bool:
    """CLI flag wins over the DRY_RUN environment variable"""
    if flag is None:
        return os.getenv('DRY_RUN', 'false').lower() == 'true'
    return flag


async def print_progress(event: str, data: Dict) -> None:
    """Render checker progress events on the console"""
    if event == "drafts_listed":
        console.print(f"Found {data['total_drafts']} draft(s) ({data['empty_drafts']} empty)")
    elif event == "deleted":
        console.print(f"[green]Deleted empty draft (ID: {data['draft_id']}, age: {data['age']})[/green]")
    elif event == "would_delete":
        console.print(f"[yellow]Would delete empty draft (ID: {data['draft_id']}, age: {data['age']})[/yellow]")
    elif event == "delete_error":
        console.print(f"[red]Error deleting draft {data['draft_id']}: {data['error']}[/red]")
    elif event == "check_failed":
        console.print(f"[red]Check failed: {data['error']}[/red]")
    else:
        logger.debug(f"Progress: {event} - {data}")


async def run(config: AppConfig, gmail: GmailService, notifier: Notifier, check_now: bool, dry_run: bool) -> int:
    """Run the checker in single-shot or continuous mode, returns exit status"""
    checker = DraftChecker(
        gmail,
        notifier,
        CheckConfig(cleanup_age=config.cleanup_age, dry_run=dry_run),
        progress_callback=print_progress
    )
    scheduler = CheckScheduler(checker, config.check_interval)

    if check_now:
        try:
            await scheduler.run_once()
        except DraftFetchError as error:
            logger.error(f"Error during check: {error}")
            return 1
        return 0

    scheduler.install_signal_handlers()
    await scheduler.run_forever()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as error:
        console.print(f"[red]Error loading config: {error}[/red]")
        return 1

    if args.write_config:
        save_config(args.config, config)
        console.print(f"[green]Wrote configuration to {args.config}[/green]")
        return 0

    if not args.check and config.check_interval <= timedelta(0):
        console.print("[red]Error loading config: check_interval must be positive for continuous checking[/red]")
        return 1

    dry_run = resolve_dry_run(args.dry_run)
    notifier = Notifier(APP_NAME)
    gmail = GmailService(config.credentials_path, config.token_path)
    gmail.set_progress_callback(print_progress)

    try:
        gmail.authenticate()
    except AuthenticationError as error:
        console.print(f"[red]Error creating Gmail client: {error}[/red]")
        try:
            notifier.notify_error(error)
        except NotificationError as notify_error:
            logger.error(f"Error sending notification: {notify_error}")
        return 1

    console.print(f"{APP_NAME} started. Checking drafts every {format_duration(config.check_interval)}")
    if dry_run:
        console.print("[bold yellow]DRY RUN MODE:[/bold yellow] no drafts will be deleted")

    try:
        return asyncio.run(run(config, gmail, notifier, args.check, dry_run))
    except KeyboardInterrupt:
        # Only reachable in --check mode; continuous mode handles SIGINT itself
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
