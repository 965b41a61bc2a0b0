from fastapi import APIRouter, Depends, Query, status
from typing import List, Literal, Optional
from sqlalchemy.orm import Session
import logging

from natureestate.core.auth import Identity, get_current_user
from natureestate.core.config import Settings, get_app_settings
from natureestate.core.database import get_db
from natureestate.models.property import MAX_SQL_INT
from natureestate.models.user import (
    MessageResponse, SavedPropertyCreate, SavedPropertyEntry, SavedPropertyPage, SavedPropertyUpdate,
    SavedSearch, SavedSearchCreate, SavedSearchUpdate,
)
from natureestate.modules.users.saved_service import SavedService

logger = logging.getLogger(__name__)

# Mounted twice: /saved-properties and /saved-searches
saved_properties_router = APIRouter()
saved_searches_router = APIRouter()


def get_saved_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> SavedService:
    return SavedService(db, settings)


# Saved properties

@saved_properties_router.get("", response_model=SavedPropertyPage)
async def list_saved_properties(
    sort_by: Literal["date_saved", "price_low_high", "location"] = Query("date_saved"),
    filter_country: Optional[str] = Query(None, min_length=1),
    limit: int = Query(20, ge=1, le=MAX_SQL_INT),
    offset: int = Query(0, ge=0, le=MAX_SQL_INT),
    identity: Identity = Depends(get_current_user),
    saved_service: SavedService = Depends(get_saved_service),
):
    """The caller's favorites joined with their listings."""
    return await saved_service.list_saved_properties(
        identity, sort_by=sort_by, filter_country=filter_country, limit=limit, offset=offset
    )


@saved_properties_router.post("", response_model=SavedPropertyEntry, status_code=status.HTTP_201_CREATED)
async def save_property(
    saved_data: SavedPropertyCreate,
    identity: Identity = Depends(get_current_user),
    saved_service: SavedService = Depends(get_saved_service),
):
    return await saved_service.save_property(identity, saved_data)


@saved_properties_router.put("/{saved_property_id}", response_model=SavedPropertyEntry)
async def update_saved_property(
    saved_property_id: str,
    saved_data: SavedPropertyUpdate,
    identity: Identity = Depends(get_current_user),
    saved_service: SavedService = Depends(get_saved_service),
):
    return await saved_service.update_saved_property(saved_property_id, identity, saved_data)


@saved_properties_router.delete("/{saved_property_id}", response_model=MessageResponse)
async def remove_saved_property(
    saved_property_id: str,
    identity: Identity = Depends(get_current_user),
    saved_service: SavedService = Depends(get_saved_service),
):
    await saved_service.remove_saved_property(saved_property_id, identity)
    return MessageResponse(message="Property removed from favorites")


# Saved searches

@saved_searches_router.get("", response_model=List[SavedSearch])
async def list_saved_searches(
    identity: Identity = Depends(get_current_user),
    saved_service: SavedService = Depends(get_saved_service),
):
    return await saved_service.list_saved_searches(identity)


@saved_searches_router.post("", response_model=SavedSearch, status_code=status.HTTP_201_CREATED)
async def create_saved_search(
    search_data: SavedSearchCreate,
    identity: Identity = Depends(get_current_user),
    saved_service: SavedService = Depends(get_saved_service),
):
    return await saved_service.create_saved_search(identity, search_data)


@saved_searches_router.put("/{saved_search_id}", response_model=SavedSearch)
async def update_saved_search(
    saved_search_id: str,
    search_data: SavedSearchUpdate,
    identity: Identity = Depends(get_current_user),
    saved_service: SavedService = Depends(get_saved_service),
):
    return await saved_service.update_saved_search(saved_search_id, identity, search_data)


@saved_searches_router.delete("/{saved_search_id}", response_model=MessageResponse)
async def delete_saved_search(
    saved_search_id: str,
    identity: Identity = Depends(get_current_user),
    saved_service: SavedService = Depends(get_saved_service),
):
    await saved_service.delete_saved_search(saved_search_id, identity)
    return MessageResponse(message="Saved search deleted successfully")
