from typing import List, Optional, Tuple

from codereview.core import ForbiddenError, NotFoundError, get_logger
from codereview.models import Notification, NotificationType, RelatedResource
from codereview.repositories import NotificationRepository, UserRepository

from .email_service import EmailService


class NotificationService:
    """Persists notifications and delivers the optional email copy."""

    def __init__(self, notifications: NotificationRepository, users: UserRepository, email: EmailService):
        self.notifications = notifications
        self.users = users
        self.email = email
        self.logger = get_logger("services.notifications")

    async def notify(
        self,
        recipient_id: str,
        notification_type: NotificationType,
        content: str,
        related_resource: Optional[RelatedResource] = None,
    ) -> Notification:
        """Create one notification for ``recipient_id`` and email it if the user opted in.

        The notification is stored before any delivery attempt. A failed email leaves
        ``email_sent`` false and is not reported to the caller.
        """
        notification_type = NotificationType(notification_type)
        notification = await self.notifications.create(
            recipient=recipient_id,
            type=notification_type,
            content=content,
            related_resource=related_resource,
            is_read=False,
            email_sent=False,
        )

        user = await self.users.get_by_id(recipient_id)
        if user is None or not user.notification_preferences.email.allows(notification_type):
            return notification

        try:
            sent = await self.email.send_notification_email(user, notification_type, content, related_resource)
        except Exception:
            self.logger.exception("notification_email_failed", notification_id=notification.id, recipient=recipient_id)
            return notification

        if sent:
            await self.notifications.update(notification.id, {"email_sent": True})
            notification.email_sent = True
        else:
            self.logger.warning("notification_email_not_sent", notification_id=notification.id, recipient=recipient_id)
        return notification

    async def list_for_user(
        self, user_id: str, *, unread_only: bool = False, skip: int = 0, limit: int = 10
    ) -> Tuple[List[Notification], int]:
        return await self.notifications.list_for_recipient(user_id, unread_only=unread_only, skip=skip, limit=limit)

    async def mark_read(self, notification_id: str, user_id: str) -> Notification:
        notification = await self.notifications.get_by_id(notification_id)
        if notification is None:
            raise NotFoundError("Notification not found")
        if notification.recipient != user_id:
            raise ForbiddenError("Not authorized to update this notification")
        if notification.is_read:
            return notification
        return await self.notifications.update(notification_id, {"is_read": True})

    async def mark_all_read(self, user_id: str) -> int:
        return await self.notifications.mark_all_read(user_id)

    async def unread_count(self, user_id: str) -> int:
        return await self.notifications.count_unread(user_id)
