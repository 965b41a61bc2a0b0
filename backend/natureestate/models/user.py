from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum

from natureestate.models.property import MAX_ROOMS, PropertyType, PropertySummary


class UserType(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"
    AGENT = "agent"
    ADMIN = "admin"


class AlertFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    NEVER = "never"


def _check_url(v: Optional[str]) -> Optional[str]:
    if v is not None and not v.startswith(("http://", "https://")):
        raise ValueError("must be an http(s) URL")
    return v


class UserRegistration(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    user_type: UserType = UserType.BUYER
    profile_photo_url: Optional[str] = None
    notification_preferences: Optional[str] = None
    countries_of_interest: Optional[str] = None

    @field_validator('profile_photo_url')
    @classmethod
    def validate_photo_url(cls, v):
        return _check_url(v)


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    user_type: Optional[UserType] = None
    profile_photo_url: Optional[str] = None
    notification_preferences: Optional[str] = None
    countries_of_interest: Optional[str] = None

    @field_validator('profile_photo_url')
    @classmethod
    def validate_photo_url(cls, v):
        return _check_url(v)

    @field_validator('email', 'name', 'user_type')
    @classmethod
    def not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class User(BaseModel):
    """Account as returned to its owner"""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    user_id: str = Field(validation_alias="id")
    email: str
    name: str
    phone: Optional[str] = None
    user_type: str
    profile_photo_url: Optional[str] = None
    is_verified: bool
    email_verified: bool
    notification_preferences: Optional[str] = None
    countries_of_interest: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    last_login_at: Optional[datetime] = None


class PublicProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    user_id: str = Field(validation_alias="id")
    name: str
    user_type: str
    profile_photo_url: Optional[str] = None
    is_verified: bool
    created_at: datetime


class AuthResponse(BaseModel):
    user: User
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class VerifyEmailRequest(BaseModel):
    token: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class SavedSearchCreate(BaseModel):
    search_name: str = Field(..., min_length=1, max_length=255)
    country: Optional[str] = Field(None, max_length=100)
    property_type: Optional[PropertyType] = None
    price_min: Optional[float] = Field(None, ge=0)
    price_max: Optional[float] = Field(None, gt=0)
    bedrooms_min: Optional[int] = Field(None, ge=0, le=MAX_ROOMS)
    bathrooms_min: Optional[int] = Field(None, ge=0, le=MAX_ROOMS)
    square_footage_min: Optional[float] = Field(None, gt=0)
    square_footage_max: Optional[float] = Field(None, gt=0)
    land_size_min: Optional[float] = Field(None, gt=0)
    land_size_max: Optional[float] = Field(None, gt=0)
    natural_features: Optional[str] = None
    outdoor_amenities: Optional[str] = None
    location_text: Optional[str] = Field(None, max_length=500)
    alert_frequency: AlertFrequency = AlertFrequency.WEEKLY
    is_active: bool = True


class SavedSearchUpdate(BaseModel):
    search_name: Optional[str] = Field(None, min_length=1, max_length=255)
    country: Optional[str] = Field(None, max_length=100)
    property_type: Optional[PropertyType] = None
    price_min: Optional[float] = Field(None, ge=0)
    price_max: Optional[float] = Field(None, gt=0)
    bedrooms_min: Optional[int] = Field(None, ge=0, le=MAX_ROOMS)
    bathrooms_min: Optional[int] = Field(None, ge=0, le=MAX_ROOMS)
    square_footage_min: Optional[float] = Field(None, gt=0)
    square_footage_max: Optional[float] = Field(None, gt=0)
    land_size_min: Optional[float] = Field(None, gt=0)
    land_size_max: Optional[float] = Field(None, gt=0)
    natural_features: Optional[str] = None
    outdoor_amenities: Optional[str] = None
    location_text: Optional[str] = Field(None, max_length=500)
    alert_frequency: Optional[AlertFrequency] = None
    is_active: Optional[bool] = None

    @field_validator('search_name', 'alert_frequency', 'is_active')
    @classmethod
    def not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class SavedSearch(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    saved_search_id: str = Field(validation_alias="id")
    user_id: str
    search_name: str
    country: Optional[str] = None
    property_type: Optional[str] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    bedrooms_min: Optional[int] = None
    bathrooms_min: Optional[int] = None
    square_footage_min: Optional[float] = None
    square_footage_max: Optional[float] = None
    land_size_min: Optional[float] = None
    land_size_max: Optional[float] = None
    natural_features: Optional[str] = None
    outdoor_amenities: Optional[str] = None
    location_text: Optional[str] = None
    alert_frequency: str
    is_active: bool
    last_alert_sent: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class SavedPropertyCreate(BaseModel):
    property_id: str = Field(..., min_length=1)
    notes: Optional[str] = Field(None, max_length=1000)


class SavedPropertyUpdate(BaseModel):
    notes: Optional[str] = Field(None, max_length=1000)


class SavedPropertyEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    saved_property_id: str = Field(validation_alias="id")
    user_id: str
    property_id: str
    notes: Optional[str] = None
    created_at: datetime


class SavedPropertyItem(SavedPropertyEntry):
    """Saved entry joined with the listing it points at"""
    property: PropertySummary


class SavedPropertyPage(BaseModel):
    saved_properties: List[SavedPropertyItem]
    total_count: int
