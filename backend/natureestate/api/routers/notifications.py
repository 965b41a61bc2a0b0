from fastapi import APIRouter, Depends, Query
from typing import Annotated
from sqlalchemy.orm import Session
import logging

from natureestate.core.auth import Identity, get_current_user
from natureestate.core.config import Settings, get_app_settings
from natureestate.core.database import get_db
from natureestate.models.notification import Notification, NotificationFilter, NotificationPage
from natureestate.models.user import MessageResponse
from natureestate.modules.notifications.service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_notification_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> NotificationService:
    return NotificationService(db, settings)


@router.get("", response_model=NotificationPage)
async def list_notifications(
    criteria: Annotated[NotificationFilter, Query()],
    identity: Identity = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    """The caller's notifications with total and unread counts."""
    return await notification_service.list_notifications(identity, criteria)


# Registered before /{notification_id}/read so the literal path wins
@router.put("/mark-all-read", response_model=MessageResponse)
async def mark_all_notifications_read(
    identity: Identity = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    updated = await notification_service.mark_all_read(identity)
    return MessageResponse(message=f"{updated} notifications marked as read")


@router.put("/{notification_id}/read", response_model=Notification)
async def mark_notification_read(
    notification_id: str,
    identity: Identity = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    return await notification_service.mark_read(notification_id, identity)
