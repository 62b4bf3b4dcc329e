"""
Emptiness classification for Gmail draft payloads
"""

from typing import Dict, Optional


def has_body_content(part: Optional[Dict]) -> bool:
    """
    Walk a Gmail MessagePart tree looking for any part with a positive body size.

    A part whose body reports size > 0 counts as content and ends the search
    on that branch. Missing trees, missing bodies and zero sizes do not count.
    """
    if not part:
        return False

    body = part.get('body') or {}
    if (body.get('size') or 0) > 0:
        return True

    return any(has_body_content(sub_part) for sub_part in part.get('parts') or [])


def is_empty_draft(subject: str, recipient: str, payload: Optional[Dict]) -> bool:
    """Empty means exactly "" for subject and recipient, and no body content.

    Whitespace is not trimmed: a subject of " " makes the draft non-empty.
    """
    return subject == "" and recipient == "" and not has_body_content(payload)
