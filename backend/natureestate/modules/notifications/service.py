from typing import Optional
import logging

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from natureestate.core.auth import Identity
from natureestate.core.config import Settings
from natureestate.core.database import commit_or_raise
from natureestate.core.errors import NotFoundError
from natureestate.db.models import Notification as DBNotification
from natureestate.models.notification import (
    Notification, NotificationFilter, NotificationPage, NotificationSortBy, NotificationType,
)

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    NotificationSortBy.CREATED_AT: DBNotification.created_at,
    NotificationSortBy.PRIORITY: DBNotification.priority,
    NotificationSortBy.TYPE: DBNotification.type,
}


class NotificationService:
    """In-app notifications for a single user"""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    def add_notification(
        self,
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        related_property_id: Optional[str] = None,
        related_inquiry_id: Optional[str] = None,
        action_url: Optional[str] = None,
        priority: str = "normal",
    ) -> DBNotification:
        """Stage a notification in the caller's unit of work (no commit).

        Email delivery is an external collaborator, so ``is_email_sent`` stays False.
        """
        db_notification = DBNotification(
            user_id=user_id,
            type=type.value,
            title=title,
            message=message,
            related_property_id=related_property_id,
            related_inquiry_id=related_inquiry_id,
            action_url=action_url,
            priority=priority,
            is_read=False,
            is_email_sent=False,
        )
        self.db.add(db_notification)
        logger.info(f"Queued {type.value} notification for user {user_id}")
        return db_notification

    async def list_notifications(self, identity: Identity, criteria: NotificationFilter) -> NotificationPage:
        conditions = [DBNotification.user_id == identity.user_id]
        if criteria.type is not None:
            conditions.append(DBNotification.type == criteria.type.value)
        if criteria.is_read is not None:
            conditions.append(DBNotification.is_read == criteria.is_read)
        if criteria.priority is not None:
            conditions.append(DBNotification.priority == criteria.priority.value)
        if criteria.date_from is not None:
            conditions.append(DBNotification.created_at >= criteria.date_from)
        if criteria.date_to is not None:
            conditions.append(DBNotification.created_at <= criteria.date_to)

        column = SORT_COLUMNS[criteria.sort_by]
        primary = column.asc() if criteria.sort_order == "asc" else column.desc()

        total_count = self.db.scalar(
            select(func.count()).select_from(DBNotification).where(*conditions)
        )
        unread_count = self.db.scalar(
            select(func.count()).select_from(DBNotification).where(
                DBNotification.user_id == identity.user_id,
                DBNotification.is_read.is_(False),
            )
        )
        rows = self.db.scalars(
            select(DBNotification)
            .where(*conditions)
            .order_by(primary, DBNotification.id)
            .offset(criteria.offset)
            .limit(criteria.limit)
        ).all()

        return NotificationPage(
            notifications=[Notification.model_validate(row) for row in rows],
            total_count=total_count or 0,
            unread_count=unread_count or 0,
        )

    async def mark_read(self, notification_id: str, identity: Identity) -> Notification:
        db_notification = self.db.get(DBNotification, notification_id)
        # Another user's notification is reported as missing
        if db_notification is None or db_notification.user_id != identity.user_id:
            raise NotFoundError("Notification not found")

        db_notification.is_read = True
        commit_or_raise(self.db, "mark notification read")
        self.db.refresh(db_notification)
        return Notification.model_validate(db_notification)

    async def mark_all_read(self, identity: Identity) -> int:
        """Mark every unread notification read; returns how many changed"""
        result = self.db.execute(
            update(DBNotification)
            .where(DBNotification.user_id == identity.user_id, DBNotification.is_read.is_(False))
            .values(is_read=True)
        )
        commit_or_raise(self.db, "mark notifications read")
        return result.rowcount
