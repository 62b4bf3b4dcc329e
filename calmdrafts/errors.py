"""
Error types shared across CalmDrafts
"""


class CalmDraftsError(Exception):
    """Base class for all CalmDrafts errors"""


class ConfigError(CalmDraftsError):
    """Configuration file missing required structure or holding invalid values"""


class AuthenticationError(CalmDraftsError):
    """Gmail credentials could not be loaded, refreshed or obtained"""


class DraftFetchError(CalmDraftsError):
    """Listing drafts failed; the whole check cycle fails"""


class DraftDeleteError(CalmDraftsError):
    """Deleting a single draft failed"""

    def __init__(self, draft_id: str, message: str):
        super().__init__(message)
        self.draft_id = draft_id


class NotificationError(CalmDraftsError):
    """Desktop notification could not be delivered"""
