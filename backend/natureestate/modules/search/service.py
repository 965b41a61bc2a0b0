from typing import Any, Dict, List, Mapping, Optional
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from natureestate.core.auth import Identity
from natureestate.core.config import Settings
from natureestate.core.errors import StorageError
from natureestate.db.models import (
    Property as DBProperty,
    PropertyPhoto as DBPropertyPhoto,
    SearchHistory as DBSearchHistory,
)
from natureestate.models.property import PrimaryPhoto, PropertySummary
from natureestate.models.search import (
    PagedResult, PropertyFilter, SearchHistoryCreate, SearchHistoryEntry, SearchHistoryPage,
)
from natureestate.modules.search.filter_normalizer import normalize_property_filter
from natureestate.modules.search.query_builder import SearchQueryBuilder

logger = logging.getLogger(__name__)

# Filter fields mirrored into a search_history row
HISTORY_FIELDS = (
    "country", "price_min", "price_max", "bedrooms_min", "bathrooms_min",
    "square_footage_min", "square_footage_max", "land_size_min", "land_size_max",
    "natural_features", "outdoor_amenities", "location_text",
)


def load_primary_photos(db: Session, property_ids: List[str]) -> Dict[str, PrimaryPhoto]:
    """Primary photo per property, fetched in one query for the whole page"""
    if not property_ids:
        return {}

    photos = db.scalars(
        select(DBPropertyPhoto)
        .where(DBPropertyPhoto.property_id.in_(property_ids), DBPropertyPhoto.is_primary.is_(True))
        .order_by(DBPropertyPhoto.property_id, DBPropertyPhoto.photo_order, DBPropertyPhoto.id)
    ).all()

    result: Dict[str, PrimaryPhoto] = {}
    for photo in photos:
        result.setdefault(photo.property_id, PrimaryPhoto.model_validate(photo))
    return result


class SearchService:
    """Service for property search and search history"""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.query_builder = SearchQueryBuilder()

    def normalize(self, raw: Mapping[str, Any]) -> PropertyFilter:
        return normalize_property_filter(raw, self.settings)

    async def search_properties(self, criteria: PropertyFilter) -> PagedResult[PropertySummary]:
        """Run a normalized filter and return one page plus the full match count"""
        predicates = self.query_builder.build_predicates(criteria)
        ordering = self.query_builder.build_ordering(criteria)

        try:
            total_count = self.db.scalar(
                select(func.count()).select_from(DBProperty).where(*predicates)
            )

            rows = self.db.scalars(
                select(DBProperty)
                .options(joinedload(DBProperty.owner))
                .where(*predicates)
                .order_by(*ordering)
                .offset(criteria.offset)
                .limit(criteria.limit)
            ).all()

            primary_photos = load_primary_photos(self.db, [row.id for row in rows])
        except SQLAlchemyError as e:
            logger.error(f"Property search failed: {e}")
            raise StorageError("Property search failed") from e

        items = [
            PropertySummary.model_validate(row).model_copy(
                update={"primary_photo": primary_photos.get(row.id)}
            )
            for row in rows
        ]
        return PagedResult[PropertySummary](items=items, total_count=total_count or 0)

    async def record_search(
        self,
        identity: Identity,
        criteria: PropertyFilter,
        results_count: int,
    ) -> SearchHistoryEntry:
        """Store the filter an authenticated user just ran"""
        values = {field: getattr(criteria, field) for field in HISTORY_FIELDS}
        history = SearchHistoryCreate(
            property_type=criteria.property_type,
            sort_by=criteria.sort_by.value,
            results_count=results_count,
            **values,
        )
        return await self.create_search_history(history, identity)

    async def create_search_history(
        self,
        data: SearchHistoryCreate,
        identity: Optional[Identity] = None,
    ) -> SearchHistoryEntry:
        values = data.model_dump()
        if data.property_type is not None:
            values["property_type"] = data.property_type.value

        db_history = DBSearchHistory(
            user_id=identity.user_id if identity else None,
            **values,
        )
        try:
            self.db.add(db_history)
            self.db.commit()
            self.db.refresh(db_history)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to record search history: {e}")
            raise StorageError("Failed to record search history") from e

        return SearchHistoryEntry.model_validate(db_history)

    async def get_search_history(self, identity: Identity, limit: int = 20, offset: int = 0) -> SearchHistoryPage:
        """Caller's history, newest first"""
        conditions = [DBSearchHistory.user_id == identity.user_id]
        try:
            total_count = self.db.scalar(
                select(func.count()).select_from(DBSearchHistory).where(*conditions)
            )
            rows = self.db.scalars(
                select(DBSearchHistory)
                .where(*conditions)
                .order_by(DBSearchHistory.created_at.desc(), DBSearchHistory.id)
                .offset(offset)
                .limit(limit)
            ).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load search history: {e}")
            raise StorageError("Failed to load search history") from e

        return SearchHistoryPage(
            search_history=[SearchHistoryEntry.model_validate(row) for row in rows],
            total_count=total_count or 0,
        )
