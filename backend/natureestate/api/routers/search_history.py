from fastapi import APIRouter, Depends, Query, status
from typing import Optional
import logging

from natureestate.api.routers.properties import get_search_service
from natureestate.core.auth import Identity, get_current_user, get_optional_user
from natureestate.models.property import MAX_SQL_INT
from natureestate.models.search import SearchHistoryCreate, SearchHistoryEntry, SearchHistoryPage
from natureestate.modules.search.service import SearchService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=SearchHistoryPage)
async def get_search_history(
    limit: int = Query(20, ge=1, le=MAX_SQL_INT),
    offset: int = Query(0, ge=0, le=MAX_SQL_INT),
    identity: Identity = Depends(get_current_user),
    search_service: SearchService = Depends(get_search_service),
):
    return await search_service.get_search_history(identity, limit=limit, offset=offset)


@router.post("", response_model=SearchHistoryEntry, status_code=status.HTTP_201_CREATED)
async def create_search_history(
    history_data: SearchHistoryCreate,
    identity: Optional[Identity] = Depends(get_optional_user),
    search_service: SearchService = Depends(get_search_service),
):
    """Record a search; anonymous callers may pass a session_id instead."""
    return await search_service.create_search_history(history_data, identity)
