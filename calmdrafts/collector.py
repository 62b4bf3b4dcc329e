"""
Draft Collector - Handles draft listing from Gmail
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Callable, Tuple

from googleapiclient.errors import HttpError
from httplib2 import HttpLib2Error

from calmdrafts.classifier import has_body_content
from calmdrafts.models import Draft, MAX_TIME, ZERO_TIME


logger = logging.getLogger(__name__)


class DraftCollector:
    """Handles draft collection from the Gmail drafts folder"""

    def __init__(
        self,
        service,  # Gmail API service object
        progress_callback: Optional[Callable] = None,
        page_size: int = 100
    ):
        self.service = service
        self.progress_callback = progress_callback
        self.page_size = page_size

    # === Main Entry Point ===

    async def collect(self) -> List[Draft]:
        """Fetch every draft and parse it into a Draft snapshot.

        Errors listing a page propagate to the caller; errors fetching a
        single draft are logged and that draft is skipped.
        """
        drafts: List[Draft] = []
        page_token = None

        while True:
            stubs, next_page_token = await self._fetch_draft_page(page_token)

            for stub in stubs:
                draft = await self._get_draft(stub['id'])
                if draft is None:
                    continue
                drafts.append(draft)

            page_token = next_page_token
            if not page_token:
                break

        logger.debug(f"Collected {len(drafts)} drafts")
        await self._report_progress("drafts_collected", {"total_drafts": len(drafts)})

        return drafts

    # === Draft Fetching ===

    async def _fetch_draft_page(self, page_token: Optional[str]) -> Tuple[List[Dict], Optional[str]]:
        """Fetch a page of draft stubs, returns (drafts, next_page_token)"""
        results = await asyncio.to_thread(
            lambda: self.service.users().drafts().list(
                userId='me',
                maxResults=self.page_size,
                pageToken=page_token
            ).execute()
        )

        return results.get('drafts', []), results.get('nextPageToken')

    async def _get_draft(self, draft_id: str) -> Optional[Draft]:
        """Fetch and parse a single draft, None if it could not be fetched"""
        try:
            draft_data = await asyncio.to_thread(
                lambda: self.service.users().drafts().get(
                    userId='me',
                    id=draft_id,
                    format='full'
                ).execute()
            )
        except (HttpError, HttpLib2Error, OSError) as error:
            logger.warning(f"Error fetching draft {draft_id}: {error}")
            return None

        return self.parse_draft(draft_id, draft_data)

    # === Parsing ===

    @classmethod
    def parse_draft(cls, draft_id: str, draft_data: Dict) -> Draft:
        """Build a Draft from a drafts.get(format='full') response"""
        message = draft_data.get('message') or {}
        payload = message.get('payload') or {}

        # Later duplicates win, matching header order in the message
        headers = {h.get('name'): h.get('value', '') for h in payload.get('headers', [])}

        return Draft(
            id=draft_id,
            message_id=message.get('id', ''),
            subject=headers.get('Subject', ''),
            recipient=headers.get('To', ''),
            created_at=cls.parse_internal_date(message.get('internalDate')),
            has_body_content=has_body_content(payload)
        )

    @staticmethod
    def parse_internal_date(value) -> datetime:
        """Convert Gmail's internalDate (epoch millis, usually a string) to whole-second UTC"""
        try:
            millis = int(value)
        except (TypeError, ValueError):
            return ZERO_TIME

        if millis <= 0:
            return ZERO_TIME

        try:
            return datetime.fromtimestamp(millis // 1000, tz=timezone.utc)
        except (OverflowError, ValueError, OSError):
            # Beyond year 9999: clamp so the draft never looks old enough to delete
            return MAX_TIME

    # === Progress ===

    async def _report_progress(self, event: str, data: Dict) -> None:
        """Send progress update if callback is set"""
        if self.progress_callback:
            await self.progress_callback(event, data)
