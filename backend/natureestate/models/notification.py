from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum

from natureestate.models.inquiry import Priority
from natureestate.models.property import MAX_SQL_INT


class NotificationType(str, Enum):
    INQUIRY = "inquiry"
    SAVED_SEARCH = "saved_search"
    PROPERTY_UPDATE = "property_update"
    SYSTEM = "system"
    MARKETING = "marketing"


class NotificationSortBy(str, Enum):
    CREATED_AT = "created_at"
    PRIORITY = "priority"
    TYPE = "type"


class NotificationFilter(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Optional[NotificationType] = None
    is_read: Optional[bool] = None
    priority: Optional[Priority] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    limit: int = Field(20, gt=0, le=MAX_SQL_INT)
    offset: int = Field(0, ge=0, le=MAX_SQL_INT)
    sort_by: NotificationSortBy = NotificationSortBy.CREATED_AT
    sort_order: str = Field("desc", pattern="^(asc|desc)$")


class Notification(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    notification_id: str = Field(validation_alias="id")
    user_id: str
    type: str
    title: str
    message: str
    related_property_id: Optional[str] = None
    related_inquiry_id: Optional[str] = None
    is_read: bool
    is_email_sent: bool
    email_sent_at: Optional[datetime] = None
    action_url: Optional[str] = None
    priority: str
    expires_at: Optional[datetime] = None
    created_at: datetime


class NotificationPage(BaseModel):
    notifications: List[Notification]
    total_count: int
    unread_count: int
