"""
Draft Cleaner - Deletes drafts that passed the retention policy
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Callable

from calmdrafts.errors import DraftDeleteError
from calmdrafts.models import Draft


logger = logging.getLogger(__name__)


class DraftCleaner:
    """Deletes drafts one at a time; a failure never stops the rest"""

    def __init__(
        self,
        mail,  # anything with async delete_draft(draft_id)
        dry_run: bool = False,
        progress_callback: Optional[Callable] = None
    ):
        self.mail = mail
        self.dry_run = dry_run
        self.progress_callback = progress_callback
        self.interrupted = False

    # === Main Entry Point ===

    async def cleanup(self, drafts: List[Draft], now: datetime) -> Dict[str, int]:
        """Delete provided drafts, returns stats dict"""
        if not drafts:
            return self._build_stats(0, 0, 0)

        total_processed = 0
        drafts_deleted = 0
        drafts_failed = 0

        for draft in drafts:
            if self.interrupted:
                logger.info("Cleanup interrupted, leaving remaining drafts for the next check")
                break

            age = self._format_age(now - draft.created_at)

            if self.dry_run:
                await self._report_progress("would_delete", {
                    "draft_id": draft.id,
                    "age": age
                })
                drafts_deleted += 1
            else:
                logger.info(f"Deleting empty draft (ID: {draft.id}, age: {age})")
                try:
                    await self.mail.delete_draft(draft.id)
                except DraftDeleteError as error:
                    logger.error(f"Error deleting draft {draft.id}: {error}")
                    await self._report_progress("delete_error", {
                        "draft_id": draft.id,
                        "error": str(error)
                    })
                    drafts_failed += 1
                else:
                    await self._report_progress("deleted", {
                        "draft_id": draft.id,
                        "age": age
                    })
                    drafts_deleted += 1

            total_processed += 1

        result = self._build_stats(total_processed, drafts_deleted, drafts_failed)
        await self._report_progress("cleanup_completed", result)

        return result

    # === Progress ===

    async def _report_progress(self, event: str, data: Dict) -> None:
        """Send progress update if callback is set"""
        if self.progress_callback:
            await self.progress_callback(event, data)

    # === Results ===

    @staticmethod
    def _format_age(age) -> str:
        """Age rounded to the hour, e.g. '240h'"""
        hours = int(round(age.total_seconds() / 3600))
        return f"{hours}h"

    @staticmethod
    def _build_stats(processed: int, deleted: int, failed: int) -> Dict[str, int]:
        """Build result statistics dict"""
        return {
            "drafts_processed": processed,
            "drafts_deleted": deleted,
            "drafts_failed": failed
        }
