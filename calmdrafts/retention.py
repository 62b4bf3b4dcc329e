"""
Retention policy - decides which drafts are old enough to delete
"""

from datetime import datetime, timedelta
from typing import Iterable, List, Tuple

from calmdrafts.models import Draft, ZERO_TIME


def cleanup_cutoff(now: datetime, cleanup_age: timedelta) -> datetime:
    """Drafts created strictly before this instant are past the cleanup age"""
    try:
        return now - cleanup_age
    except OverflowError:
        return ZERO_TIME


def is_expired(draft: Draft, now: datetime, cleanup_age: timedelta) -> bool:
    """
    Empty drafts older than cleanup_age are eligible for deletion.

    Drafts without a Gmail timestamp carry ZERO_TIME and are therefore always
    older than any realistic cutoff.
    """
    if not draft.is_empty:
        return False
    return draft.created_at < cleanup_cutoff(now, cleanup_age)


def select_expired(drafts: Iterable[Draft], now: datetime, cleanup_age: timedelta) -> List[Draft]:
    """Filter drafts down to the ones eligible for deletion, keeping order"""
    return [draft for draft in drafts if is_expired(draft, now, cleanup_age)]


def summarize(drafts: Iterable[Draft]) -> Tuple[int, int]:
    """Returns (total_count, empty_count)"""
    total_count = 0
    empty_count = 0
    for draft in drafts:
        total_count += 1
        if draft.is_empty:
            empty_count += 1
    return total_count, empty_count
