"""
Draft Checker - Runs one check cycle over the drafts folder
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from calmdrafts.cleaner import DraftCleaner
from calmdrafts.errors import DraftFetchError, NotificationError
from calmdrafts.models import CheckConfig, CheckResult
from calmdrafts.retention import select_expired, summarize


logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DraftChecker:
    """
    Lists drafts, notifies about them and deletes empty drafts past the cleanup age.

    Only a failure to list drafts fails the cycle. Notification and per-draft
    deletion failures are logged and the cycle carries on.
    """

    def __init__(
        self,
        mail,  # GmailService or anything with list_drafts()/delete_draft()
        notifier,
        config: CheckConfig,
        progress_callback: Optional[Callable] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.mail = mail
        self.notifier = notifier
        self.config = config
        self.progress_callback = progress_callback
        self.clock = clock
        self.cleaner = DraftCleaner(mail, dry_run=config.dry_run, progress_callback=progress_callback)
        self.interrupted = False

    def interrupt(self) -> None:
        """Stop before the next deletion; deletions already issued stay applied"""
        self.interrupted = True
        self.cleaner.interrupted = True

    # === Main Entry Point ===

    async def check(self) -> CheckResult:
        """Run a single check cycle"""
        logger.info("Checking drafts...")
        await self._report_progress("check_started", {"dry_run": self.config.dry_run})

        try:
            drafts = await self.mail.list_drafts()
        except DraftFetchError as error:
            logger.error(f"Error listing drafts: {error}")
            self._send(self.notifier.notify_error, error)
            await self._report_progress("check_failed", {"error": str(error)})
            raise

        total_count, empty_count = summarize(drafts)
        logger.info(f"Found {total_count} draft(s) ({empty_count} empty)")
        await self._report_progress("drafts_listed", {
            "total_drafts": total_count,
            "empty_drafts": empty_count
        })

        self._send(self.notifier.notify_drafts_with_details, total_count, empty_count)

        now = self.clock()
        eligible = select_expired(drafts, now, self.config.cleanup_age)
        result = CheckResult(
            total_count=total_count,
            empty_count=empty_count,
            eligible_count=len(eligible),
            dry_run=self.config.dry_run
        )

        if self.interrupted:
            result.interrupted = True
        elif eligible:
            stats = await self.cleaner.cleanup(eligible, now)
            result.deleted_count = stats["drafts_deleted"]
            result.failed_count = stats["drafts_failed"]
            result.interrupted = self.interrupted

        if result.deleted_count > 0 and not self.config.dry_run:
            logger.info(f"Deleted {result.deleted_count} old empty draft(s)")
            self._send(self.notifier.notify_cleanup, result.deleted_count)

        await self._report_progress("check_completed", {
            "total_drafts": result.total_count,
            "empty_drafts": result.empty_count,
            "eligible_drafts": result.eligible_count,
            "deleted_drafts": result.deleted_count,
            "failed_drafts": result.failed_count,
            "dry_run": result.dry_run
        })

        return result

    # === Notifications ===

    @staticmethod
    def _send(send: Callable, *args) -> None:
        """Notifications are best-effort: log failures and move on"""
        try:
            send(*args)
        except NotificationError as error:
            logger.error(f"Error sending notification: {error}")

    # === Progress ===

    async def _report_progress(self, event: str, data: Dict) -> None:
        """Send progress update if callback is set"""
        if self.progress_callback:
            await self.progress_callback(event, data)
