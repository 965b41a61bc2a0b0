from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum

from natureestate.models.property import MAX_SQL_INT


class InquiryStatus(str, Enum):
    UNREAD = "unread"
    READ = "read"
    RESPONDED = "responded"
    ARCHIVED = "archived"


class Priority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class InquirySortBy(str, Enum):
    CREATED_AT = "created_at"
    PRIORITY = "priority"
    STATUS = "status"


class InquiryCreate(BaseModel):
    sender_name: str = Field(..., min_length=1, max_length=255)
    sender_email: EmailStr
    sender_phone: Optional[str] = Field(None, max_length=50)
    message: str = Field(..., min_length=1, max_length=2000)
    is_interested_in_viewing: bool = False
    wants_similar_properties: bool = False
    priority: Priority = Priority.NORMAL


class InquiryUpdate(BaseModel):
    status: Optional[InquiryStatus] = None
    response_message: Optional[str] = Field(None, max_length=2000)
    priority: Optional[Priority] = None

    @field_validator('status', 'priority')
    @classmethod
    def not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class InquiryFilter(BaseModel):
    """Query parameters of GET /inquiries"""
    model_config = ConfigDict(frozen=True)

    status: Optional[InquiryStatus] = None
    priority: Optional[Priority] = None
    is_interested_in_viewing: Optional[bool] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    limit: int = Field(10, gt=0, le=MAX_SQL_INT)
    offset: int = Field(0, ge=0, le=MAX_SQL_INT)
    sort_by: InquirySortBy = InquirySortBy.CREATED_AT
    sort_order: str = Field("desc", pattern="^(asc|desc)$")


class Inquiry(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    inquiry_id: str = Field(validation_alias="id")
    property_id: str
    sender_user_id: Optional[str] = None
    recipient_user_id: str
    sender_name: str
    sender_email: str
    sender_phone: Optional[str] = None
    message: str
    status: str
    is_interested_in_viewing: bool
    wants_similar_properties: bool
    response_message: Optional[str] = None
    responded_at: Optional[datetime] = None
    priority: str
    created_at: datetime
    updated_at: datetime


class InquiryWithProperty(Inquiry):
    property_title: Optional[str] = None
    property_price: Optional[float] = None
    property_country: Optional[str] = None


class InquiryPage(BaseModel):
    inquiries: List[InquiryWithProperty]
    total_count: int


class InquiryResponseCreate(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)
    attachments: Optional[str] = None


class InquiryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    response_id: str = Field(validation_alias="id")
    inquiry_id: str
    sender_user_id: str
    message: str
    attachments: Optional[str] = None
    is_read: bool
    created_at: datetime
