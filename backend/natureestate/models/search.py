from pydantic import BaseModel, ConfigDict, Field
from typing import Generic, List, Optional, TypeVar
from datetime import datetime
from enum import Enum

from natureestate.models.property import MAX_ROOMS, MAX_SQL_INT, MAX_YEAR, PropertyType, PropertyStatus, PropertySummary

T = TypeVar("T")


class SortBy(str, Enum):
    PRICE = "price"
    CREATED_AT = "created_at"
    VIEW_COUNT = "view_count"
    TITLE = "title"
    SQUARE_FOOTAGE = "square_footage"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class PropertyFilter(BaseModel):
    """Normalized property search filter.

    Built once per request from query-string input and immutable afterwards.
    Every attribute left as ``None`` contributes no predicate; ``status``,
    ``limit``, ``offset``, ``sort_by`` and ``sort_order`` always carry a value.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    # Free text
    query: Optional[str] = Field(None, min_length=1)
    location_text: Optional[str] = Field(None, min_length=1)

    # Exact match
    country: Optional[str] = Field(None, min_length=1)
    region: Optional[str] = Field(None, min_length=1)
    city: Optional[str] = Field(None, min_length=1)
    property_type: Optional[PropertyType] = None
    status: PropertyStatus = PropertyStatus.ACTIVE
    is_featured: Optional[bool] = None

    # Ranges (inclusive)
    price_min: Optional[float] = Field(None, ge=0)
    price_max: Optional[float] = Field(None, gt=0)
    bedrooms_min: Optional[int] = Field(None, ge=0, le=MAX_ROOMS)
    bathrooms_min: Optional[int] = Field(None, ge=0, le=MAX_ROOMS)
    square_footage_min: Optional[float] = Field(None, gt=0)
    square_footage_max: Optional[float] = Field(None, gt=0)
    land_size_min: Optional[float] = Field(None, gt=0)
    land_size_max: Optional[float] = Field(None, gt=0)
    year_built_min: Optional[int] = Field(None, ge=0, le=MAX_YEAR)
    year_built_max: Optional[int] = Field(None, ge=0, le=MAX_YEAR)

    # Substring match against serialized lists
    natural_features: Optional[str] = Field(None, min_length=1)
    outdoor_amenities: Optional[str] = Field(None, min_length=1)

    # Paging and ordering
    limit: int = Field(20, gt=0, le=MAX_SQL_INT)
    offset: int = Field(0, ge=0, le=MAX_SQL_INT)
    sort_by: SortBy = SortBy.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC


class PagedResult(BaseModel, Generic[T]):
    """One page of rows plus the unwindowed match count"""
    items: List[T]
    total_count: int


class PropertySearchResponse(BaseModel):
    """Response body of GET /properties"""
    properties: List[PropertySummary]
    total_count: int
    page: int
    per_page: int
    total_pages: int


class SearchHistoryCreate(BaseModel):
    session_id: Optional[str] = Field(None, max_length=100)
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
    sort_by: Optional[str] = Field(None, max_length=50)
    results_count: Optional[int] = Field(None, ge=0, le=MAX_SQL_INT)


class SearchHistoryEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    search_history_id: str = Field(validation_alias="id")
    user_id: Optional[str] = None
    session_id: Optional[str] = None
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
    sort_by: Optional[str] = None
    results_count: Optional[int] = None
    created_at: datetime


class SearchHistoryPage(BaseModel):
    search_history: List[SearchHistoryEntry]
    total_count: int
