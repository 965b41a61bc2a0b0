from fastapi import APIRouter, Depends, Query, Request, status
from typing import List, Optional
from sqlalchemy.orm import Session
import logging
import math

from natureestate.core.auth import Identity, get_current_user, get_optional_user
from natureestate.core.config import Settings, get_app_settings
from natureestate.core.database import get_db
from natureestate.models.inquiry import Inquiry, InquiryCreate, InquiryPage, InquiryStatus
from natureestate.models.property import (
    MAX_SQL_INT, PropertyAnalytics, PropertyCreate, PropertyDetail, PropertyPhoto, PropertyPhotoCreate,
    PropertyPhotoUpdate, PropertyUpdate, PropertyViewCreate,
)
from natureestate.models.search import PropertySearchResponse
from natureestate.models.user import MessageResponse
from natureestate.modules.inquiries.service import InquiryService
from natureestate.modules.properties.service import PropertyService
from natureestate.modules.search.service import SearchService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_search_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> SearchService:
    return SearchService(db, settings)


def get_property_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> PropertyService:
    return PropertyService(db, settings)


def get_inquiry_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> InquiryService:
    return InquiryService(db, settings)


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


@router.get("", response_model=PropertySearchResponse)
async def search_properties(
    request: Request,
    identity: Optional[Identity] = Depends(get_optional_user),
    search_service: SearchService = Depends(get_search_service),
):
    """
    Search listings.

    Query parameters are the PropertyFilter fields (query, country, region,
    city, property_type, status, price_min/max, bedrooms_min, bathrooms_min,
    square_footage_min/max, land_size_min/max, year_built_min/max,
    natural_features, outdoor_amenities, location_text, is_featured, limit,
    offset, sort_by, sort_order). Every invalid parameter is reported at once.
    """
    criteria = search_service.normalize(request.query_params)
    result = await search_service.search_properties(criteria)

    if identity is not None:
        await search_service.record_search(identity, criteria, result.total_count)

    return PropertySearchResponse(
        properties=result.items,
        total_count=result.total_count,
        page=criteria.offset // criteria.limit + 1,
        per_page=criteria.limit,
        total_pages=math.ceil(result.total_count / criteria.limit),
    )


@router.post("", response_model=PropertyDetail, status_code=status.HTTP_201_CREATED)
async def create_property(
    property_data: PropertyCreate,
    identity: Identity = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service),
):
    """Create a listing owned by the caller; it starts out active."""
    return await property_service.create_property(identity, property_data)


@router.get("/{property_id}", response_model=PropertyDetail)
async def get_property(
    property_id: str,
    request: Request,
    identity: Optional[Identity] = Depends(get_optional_user),
    property_service: PropertyService = Depends(get_property_service),
):
    """
    Get listing details with owner and photos.

    Every call increments the view counter; identified callers (token or
    X-Session-Id header) also leave a view record.
    """
    return await property_service.get_property(
        property_id,
        identity=identity,
        session_id=request.headers.get("x-session-id"),
        ip_address=_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        referrer_url=request.headers.get("referer"),
    )


@router.put("/{property_id}", response_model=PropertyDetail)
@router.patch("/{property_id}", response_model=PropertyDetail)
async def update_property(
    property_id: str,
    property_data: PropertyUpdate,
    identity: Identity = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service),
):
    """Partially update a listing (owner only)."""
    return await property_service.update_property(property_id, identity, property_data)


@router.delete("/{property_id}", response_model=MessageResponse)
async def delete_property(
    property_id: str,
    identity: Identity = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service),
):
    await property_service.delete_property(property_id, identity)
    return MessageResponse(message="Property deleted successfully")


@router.post("/{property_id}/view", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def track_property_view(
    property_id: str,
    request: Request,
    view_data: PropertyViewCreate,
    identity: Optional[Identity] = Depends(get_optional_user),
    property_service: PropertyService = Depends(get_property_service),
):
    await property_service.track_view(
        property_id,
        view_data,
        identity=identity,
        ip_address=_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return MessageResponse(message="Property view tracked")


# Photos

@router.get("/{property_id}/photos", response_model=List[PropertyPhoto])
async def list_property_photos(
    property_id: str,
    property_service: PropertyService = Depends(get_property_service),
):
    return await property_service.list_photos(property_id)


@router.post("/{property_id}/photos", response_model=PropertyPhoto, status_code=status.HTTP_201_CREATED)
async def add_property_photo(
    property_id: str,
    photo_data: PropertyPhotoCreate,
    identity: Identity = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service),
):
    """Add a photo; marking it primary clears the previous primary."""
    return await property_service.add_photo(property_id, identity, photo_data)


@router.put("/{property_id}/photos/{photo_id}", response_model=PropertyPhoto)
async def update_property_photo(
    property_id: str,
    photo_id: str,
    photo_data: PropertyPhotoUpdate,
    identity: Identity = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service),
):
    return await property_service.update_photo(property_id, photo_id, identity, photo_data)


@router.delete("/{property_id}/photos/{photo_id}", response_model=MessageResponse)
async def delete_property_photo(
    property_id: str,
    photo_id: str,
    identity: Identity = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service),
):
    await property_service.delete_photo(property_id, photo_id, identity)
    return MessageResponse(message="Photo deleted successfully")


# Inquiries and analytics

@router.get("/{property_id}/inquiries", response_model=InquiryPage)
async def list_property_inquiries(
    property_id: str,
    inquiry_status: Optional[InquiryStatus] = Query(None, alias="status"),
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0, le=MAX_SQL_INT),
    identity: Identity = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service),
):
    """Inquiries received for one listing (owner only)."""
    return await property_service.list_property_inquiries(
        property_id, identity, status=inquiry_status, limit=limit, offset=offset
    )


@router.post("/{property_id}/inquiries", response_model=Inquiry, status_code=status.HTTP_201_CREATED)
async def create_property_inquiry(
    property_id: str,
    inquiry_data: InquiryCreate,
    identity: Optional[Identity] = Depends(get_optional_user),
    inquiry_service: InquiryService = Depends(get_inquiry_service),
):
    """Contact the owner of an active listing. Anonymous senders are allowed."""
    return await inquiry_service.create_inquiry(property_id, inquiry_data, identity)


@router.get("/{property_id}/analytics", response_model=List[PropertyAnalytics])
async def get_property_analytics(
    property_id: str,
    date_from: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}-\d{2}$"),
    date_to: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}-\d{2}$"),
    limit: int = Query(30, ge=1, le=MAX_SQL_INT),
    offset: int = Query(0, ge=0, le=MAX_SQL_INT),
    identity: Identity = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service),
):
    return await property_service.get_analytics(
        property_id, identity, date_from=date_from, date_to=date_to, limit=limit, offset=offset
    )
