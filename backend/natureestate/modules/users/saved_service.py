from typing import List, Optional
import logging

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from natureestate.core.auth import Identity
from natureestate.core.config import Settings
from natureestate.core.database import commit_or_raise
from natureestate.core.errors import ConflictError, NotFoundError, ValidationError
from natureestate.db.models import (
    Property as DBProperty,
    SavedProperty as DBSavedProperty,
    SavedSearch as DBSavedSearch,
)
from natureestate.models.property import PropertySummary
from natureestate.models.user import (
    SavedPropertyCreate, SavedPropertyEntry, SavedPropertyItem, SavedPropertyPage, SavedPropertyUpdate,
    SavedSearch, SavedSearchCreate, SavedSearchUpdate,
)
from natureestate.modules.properties.service import record_daily_activity
from natureestate.modules.search.service import load_primary_photos

logger = logging.getLogger(__name__)


class SavedService:
    """Favorites and saved search criteria, always scoped to the caller"""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    # Saved properties

    async def list_saved_properties(
        self,
        identity: Identity,
        sort_by: str = "date_saved",
        filter_country: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> SavedPropertyPage:
        conditions = [DBSavedProperty.user_id == identity.user_id]
        if filter_country:
            conditions.append(DBProperty.country.icontains(filter_country, autoescape=True))

        if sort_by == "price_low_high":
            ordering = [DBProperty.price.asc()]
        elif sort_by == "location":
            ordering = [DBProperty.country.asc(), DBProperty.region.asc(), DBProperty.city.asc()]
        else:
            ordering = [DBSavedProperty.created_at.desc()]
        ordering.append(DBSavedProperty.id)

        total_count = self.db.scalar(
            select(func.count())
            .select_from(DBSavedProperty)
            .join(DBProperty, DBSavedProperty.property_id == DBProperty.id)
            .where(*conditions)
        )
        rows = self.db.scalars(
            select(DBSavedProperty)
            .join(DBProperty, DBSavedProperty.property_id == DBProperty.id)
            .options(joinedload(DBSavedProperty.property).joinedload(DBProperty.owner))
            .where(*conditions)
            .order_by(*ordering)
            .offset(offset)
            .limit(limit)
        ).all()

        photos = load_primary_photos(self.db, [row.property_id for row in rows])
        items = []
        for row in rows:
            summary = PropertySummary.model_validate(row.property).model_copy(
                update={"primary_photo": photos.get(row.property_id)}
            )
            items.append(SavedPropertyItem.model_validate(row).model_copy(update={"property": summary}))

        return SavedPropertyPage(saved_properties=items, total_count=total_count or 0)

    async def save_property(self, identity: Identity, data: SavedPropertyCreate) -> SavedPropertyEntry:
        existing = self.db.scalar(
            select(DBSavedProperty).where(
                DBSavedProperty.user_id == identity.user_id,
                DBSavedProperty.property_id == data.property_id,
            )
        )
        if existing is not None:
            raise ConflictError("Property already saved")

        if self.db.get(DBProperty, data.property_id) is None:
            raise NotFoundError("Property not found")

        db_saved = DBSavedProperty(user_id=identity.user_id, property_id=data.property_id, notes=data.notes)
        self.db.add(db_saved)
        try:
            self.db.flush()
        except IntegrityError as e:
            # Saved by a concurrent request after the check above
            self.db.rollback()
            raise ConflictError("Property already saved") from e
        self.db.execute(
            update(DBProperty)
            .where(DBProperty.id == data.property_id)
            .values(favorite_count=DBProperty.favorite_count + 1)
        )
        record_daily_activity(self.db, data.property_id, "favorites_count")
        commit_or_raise(self.db, "save property")
        self.db.refresh(db_saved)
        return SavedPropertyEntry.model_validate(db_saved)

    def _get_saved(self, saved_property_id: str, identity: Identity) -> DBSavedProperty:
        db_saved = self.db.get(DBSavedProperty, saved_property_id)
        if db_saved is None or db_saved.user_id != identity.user_id:
            raise NotFoundError("Saved property not found")
        return db_saved

    async def update_saved_property(
        self,
        saved_property_id: str,
        identity: Identity,
        data: SavedPropertyUpdate,
    ) -> SavedPropertyEntry:
        db_saved = self._get_saved(saved_property_id, identity)
        db_saved.notes = data.notes
        commit_or_raise(self.db, "update saved property")
        self.db.refresh(db_saved)
        return SavedPropertyEntry.model_validate(db_saved)

    async def remove_saved_property(self, saved_property_id: str, identity: Identity) -> None:
        db_saved = self._get_saved(saved_property_id, identity)
        property_id = db_saved.property_id

        self.db.delete(db_saved)
        self.db.execute(
            update(DBProperty)
            .where(DBProperty.id == property_id, DBProperty.favorite_count > 0)
            .values(favorite_count=DBProperty.favorite_count - 1)
        )
        commit_or_raise(self.db, "remove saved property")

    # Saved searches

    async def list_saved_searches(self, identity: Identity) -> List[SavedSearch]:
        rows = self.db.scalars(
            select(DBSavedSearch)
            .where(DBSavedSearch.user_id == identity.user_id)
            .order_by(DBSavedSearch.created_at.desc(), DBSavedSearch.id)
        ).all()
        return [SavedSearch.model_validate(row) for row in rows]

    async def create_saved_search(self, identity: Identity, data: SavedSearchCreate) -> SavedSearch:
        db_search = DBSavedSearch(user_id=identity.user_id, **data.model_dump(mode="json"))
        self.db.add(db_search)
        commit_or_raise(self.db, "create saved search")
        self.db.refresh(db_search)
        return SavedSearch.model_validate(db_search)

    def _get_saved_search(self, saved_search_id: str, identity: Identity) -> DBSavedSearch:
        db_search = self.db.get(DBSavedSearch, saved_search_id)
        if db_search is None or db_search.user_id != identity.user_id:
            raise NotFoundError("Saved search not found")
        return db_search

    async def update_saved_search(
        self,
        saved_search_id: str,
        identity: Identity,
        data: SavedSearchUpdate,
    ) -> SavedSearch:
        db_search = self._get_saved_search(saved_search_id, identity)

        changes = data.model_dump(exclude_unset=True, mode="json")
        if not changes:
            raise ValidationError([], message="No fields to update")

        for field, value in changes.items():
            setattr(db_search, field, value)
        commit_or_raise(self.db, "update saved search")
        self.db.refresh(db_search)
        return SavedSearch.model_validate(db_search)

    async def delete_saved_search(self, saved_search_id: str, identity: Identity) -> None:
        db_search = self._get_saved_search(saved_search_id, identity)
        self.db.delete(db_search)
        commit_or_raise(self.db, "delete saved search")
