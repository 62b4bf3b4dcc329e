"""
Desktop notifications about the drafts folder
"""

import logging

from plyer import notification

from calmdrafts import APP_NAME
from calmdrafts.errors import NotificationError


logger = logging.getLogger(__name__)


class Notifier:
    """Sends desktop notifications through the platform's notification service"""

    def __init__(self, app_name: str = APP_NAME, timeout: int = 10):
        self.app_name = app_name
        self.timeout = timeout

    def notify(self, title: str, message: str) -> None:
        """Deliver one notification, raising NotificationError if the backend fails"""
        logger.debug(f"Notification: {title} - {message}")
        try:
            notification.notify(
                title=title,
                message=message,
                app_name=self.app_name,
                timeout=self.timeout
            )
        except Exception as error:
            # plyer backends raise anything from NotImplementedError to dbus errors
            raise NotificationError(f"Unable to send notification: {error}") from error

    # === Messages ===

    def notify_drafts_with_details(self, count: int, empty_count: int) -> None:
        """Notify about the number of drafts and how many of them are empty"""
        message = f"You have {count} draft(s) in your Gmail"
        if empty_count > 0:
            message += f" ({empty_count} empty)"

        self.notify(self.app_name, message)

    def notify_cleanup(self, deleted_count: int) -> None:
        """Notify about deleted empty drafts; silent when nothing was deleted"""
        if deleted_count == 0:
            return

        self.notify(self.app_name, f"Deleted {deleted_count} old empty draft(s)")

    def notify_error(self, error: Exception) -> None:
        """Notify about a failed check"""
        self.notify(f"{self.app_name} - Error", f"Error: {error}")
