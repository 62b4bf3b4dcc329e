"""
Shared data models for CalmDrafts
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone


# Stand-in timestamp for drafts Gmail returns without an internalDate
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)
MAX_TIME = datetime.max.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class Draft:
    """Snapshot of a single Gmail draft, valid for one check cycle"""
    id: str
    message_id: str
    subject: str = ""
    recipient: str = ""
    created_at: datetime = ZERO_TIME
    has_body_content: bool = False

    @property
    def is_empty(self) -> bool:
        """No subject, no recipient and no body content at any depth"""
        return self.subject == "" and self.recipient == "" and not self.has_body_content


@dataclass(frozen=True)
class CheckConfig:
    """Policy parameters for a check cycle"""
    cleanup_age: timedelta = timedelta(days=7)
    dry_run: bool = False


@dataclass
class CheckResult:
    """Outcome of one check cycle"""
    total_count: int = 0
    empty_count: int = 0
    eligible_count: int = 0
    deleted_count: int = 0
    failed_count: int = 0
    dry_run: bool = False
    interrupted: bool = False
