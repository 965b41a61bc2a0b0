from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum

# Largest integer a BIGINT column, LIMIT or OFFSET accepts
MAX_SQL_INT = 2**63 - 1
MAX_ROOMS = 1000
MAX_YEAR = 9999
MAX_LISTING_DAYS = 3650


class PropertyType(str, Enum):
    VILLA = "villa"
    CABIN = "cabin"
    CONDOMINIUM = "condominium"
    FARM = "farm"
    LAND = "land"
    MANSION = "mansion"
    HOUSE = "house"
    APARTMENT = "apartment"
    COMMERCIAL = "commercial"


class PropertyStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SOLD = "sold"
    PENDING = "pending"
    WITHDRAWN = "withdrawn"


class LandSizeUnit(str, Enum):
    ACRES = "acres"
    HECTARES = "hectares"
    SQFT = "sqft"
    SQM = "sqm"


class PropertyCondition(str, Enum):
    EXCELLENT = "excellent"
    VERY_GOOD = "very good"
    GOOD = "good"
    FAIR = "fair"
    NEEDS_WORK = "needs work"
    PRISTINE = "pristine"
    RESTORED = "restored"


class PhotoType(str, Enum):
    EXTERIOR = "exterior"
    INTERIOR = "interior"
    AERIAL = "aerial"
    FLOOR_PLAN = "floor_plan"
    AMENITY = "amenity"


def _check_year_built(v: Optional[int]) -> Optional[int]:
    if v is not None and not 1800 <= v <= datetime.now().year:
        raise ValueError(f"year_built must be between 1800 and {datetime.now().year}")
    return v


class PropertyCreate(BaseModel):
    """Body of POST /properties"""
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=5000)
    property_type: PropertyType
    price: float = Field(..., gt=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    country: str = Field(..., min_length=1, max_length=100)
    region: Optional[str] = Field(None, max_length=100)
    city: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=500)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    square_footage: Optional[float] = Field(None, gt=0)
    land_size: Optional[float] = Field(None, gt=0)
    land_size_unit: Optional[LandSizeUnit] = None
    bedrooms: Optional[int] = Field(None, ge=0, le=MAX_ROOMS)
    bathrooms: Optional[int] = Field(None, ge=0, le=MAX_ROOMS)
    year_built: Optional[int] = None

    # Serialized lists (e.g. '["beach","forest"]')
    natural_features: Optional[str] = None
    outdoor_amenities: Optional[str] = None
    indoor_amenities: Optional[str] = None
    view_types: Optional[str] = None
    nearby_attractions: Optional[str] = None
    distance_to_landmarks: Optional[str] = None
    environmental_features: Optional[str] = None
    outdoor_activities: Optional[str] = None
    property_condition: Optional[PropertyCondition] = None
    special_features: Optional[str] = None

    listing_duration_days: int = Field(90, gt=0, le=MAX_LISTING_DAYS)

    @field_validator('year_built')
    @classmethod
    def validate_year_built(cls, v):
        return _check_year_built(v)


class PropertyUpdate(BaseModel):
    """Partial update; only fields present in the body are applied"""
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=5000)
    property_type: Optional[PropertyType] = None
    status: Optional[PropertyStatus] = None
    price: Optional[float] = Field(None, gt=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    country: Optional[str] = Field(None, min_length=1, max_length=100)
    region: Optional[str] = Field(None, max_length=100)
    city: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=500)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    square_footage: Optional[float] = Field(None, gt=0)
    land_size: Optional[float] = Field(None, gt=0)
    land_size_unit: Optional[LandSizeUnit] = None
    bedrooms: Optional[int] = Field(None, ge=0, le=MAX_ROOMS)
    bathrooms: Optional[int] = Field(None, ge=0, le=MAX_ROOMS)
    year_built: Optional[int] = None
    natural_features: Optional[str] = None
    outdoor_amenities: Optional[str] = None
    indoor_amenities: Optional[str] = None
    view_types: Optional[str] = None
    nearby_attractions: Optional[str] = None
    distance_to_landmarks: Optional[str] = None
    environmental_features: Optional[str] = None
    outdoor_activities: Optional[str] = None
    property_condition: Optional[PropertyCondition] = None
    special_features: Optional[str] = None
    is_featured: Optional[bool] = None
    featured_until: Optional[datetime] = None

    @field_validator('year_built')
    @classmethod
    def validate_year_built(cls, v):
        return _check_year_built(v)

    @field_validator('title', 'country', 'property_type', 'status', 'price', 'currency', 'is_featured')
    @classmethod
    def not_null(cls, v, info):
        # These columns are NOT NULL; an explicit null is rejected rather than stored
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class OwnerSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    user_id: str = Field(validation_alias="id")
    name: str
    email: str
    phone: Optional[str] = None
    user_type: str
    profile_photo_url: Optional[str] = None
    is_verified: bool = False


class PrimaryPhoto(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    photo_url: str
    caption: Optional[str] = None


class PropertyPhotoCreate(BaseModel):
    photo_url: str = Field(..., min_length=1, max_length=1000)
    caption: Optional[str] = Field(None, max_length=500)
    photo_order: int = Field(0, ge=0, le=MAX_SQL_INT)
    is_primary: bool = False
    photo_type: Optional[PhotoType] = None
    file_size: Optional[int] = Field(None, gt=0, le=MAX_SQL_INT)

    @field_validator('photo_url')
    @classmethod
    def validate_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError("photo_url must be an http(s) URL")
        return v


class PropertyPhotoUpdate(BaseModel):
    caption: Optional[str] = Field(None, max_length=500)
    photo_order: Optional[int] = Field(None, ge=0, le=MAX_SQL_INT)
    is_primary: Optional[bool] = None
    photo_type: Optional[PhotoType] = None


class PropertyPhoto(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    photo_id: str = Field(validation_alias="id")
    property_id: str
    photo_url: str
    caption: Optional[str] = None
    photo_order: int
    is_primary: bool
    photo_type: Optional[str] = None
    file_size: Optional[int] = None
    created_at: datetime


class Property(BaseModel):
    """Listing as stored"""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    property_id: str = Field(validation_alias="id")
    user_id: str
    title: str
    description: Optional[str] = None
    property_type: str
    status: str
    price: float
    currency: str
    country: str
    region: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    square_footage: Optional[float] = None
    land_size: Optional[float] = None
    land_size_unit: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    year_built: Optional[int] = None
    natural_features: Optional[str] = None
    outdoor_amenities: Optional[str] = None
    indoor_amenities: Optional[str] = None
    view_types: Optional[str] = None
    nearby_attractions: Optional[str] = None
    distance_to_landmarks: Optional[str] = None
    environmental_features: Optional[str] = None
    outdoor_activities: Optional[str] = None
    property_condition: Optional[str] = None
    special_features: Optional[str] = None
    listing_duration_days: int
    is_featured: bool
    featured_until: Optional[datetime] = None
    view_count: int
    inquiry_count: int
    favorite_count: int
    created_at: datetime
    updated_at: datetime
    expires_at: Optional[datetime] = None


class PropertySummary(Property):
    """Search result row decorated with owner and primary photo"""
    owner: OwnerSummary
    primary_photo: Optional[PrimaryPhoto] = None


class PropertyDetail(Property):
    owner: OwnerSummary
    photos: List[PropertyPhoto] = []


class PropertyViewCreate(BaseModel):
    session_id: Optional[str] = Field(None, max_length=100)
    referrer_url: Optional[str] = Field(None, max_length=1000)
    view_duration_seconds: Optional[int] = Field(None, gt=0, le=MAX_SQL_INT)


class PropertyAnalytics(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    analytics_id: str = Field(validation_alias="id")
    property_id: str
    date: str
    views_count: int
    inquiries_count: int
    favorites_count: int
    shares_count: int
    search_impressions: int
    created_at: datetime
