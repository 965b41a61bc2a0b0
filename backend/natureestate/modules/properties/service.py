from typing import Dict, FrozenSet, List, Optional
from datetime import timedelta
import logging

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload

from natureestate.core.auth import Identity
from natureestate.core.config import Settings
from natureestate.core.database import commit_or_raise
from natureestate.core.errors import FieldError, NotFoundError, PermissionDeniedError, ValidationError
from natureestate.db.models import (
    Property as DBProperty,
    PropertyAnalytics as DBPropertyAnalytics,
    PropertyInquiry as DBPropertyInquiry,
    PropertyPhoto as DBPropertyPhoto,
    PropertyView as DBPropertyView,
    utcnow,
)
from natureestate.models.inquiry import InquiryPage, InquiryWithProperty, InquiryStatus
from natureestate.models.property import (
    PropertyAnalytics, PropertyCreate, PropertyDetail, PropertyPhoto, PropertyPhotoCreate,
    PropertyPhotoUpdate, PropertyStatus, PropertyUpdate, PropertyViewCreate,
)

logger = logging.getLogger(__name__)

# Allowed targets per status when STRICT_STATUS_TRANSITIONS is on
STATUS_TRANSITIONS: Dict[PropertyStatus, FrozenSet[PropertyStatus]] = {
    PropertyStatus.ACTIVE: frozenset({
        PropertyStatus.INACTIVE, PropertyStatus.SOLD, PropertyStatus.PENDING, PropertyStatus.WITHDRAWN,
    }),
    PropertyStatus.INACTIVE: frozenset({PropertyStatus.ACTIVE, PropertyStatus.WITHDRAWN}),
    PropertyStatus.PENDING: frozenset({PropertyStatus.ACTIVE, PropertyStatus.SOLD, PropertyStatus.WITHDRAWN}),
    PropertyStatus.WITHDRAWN: frozenset({PropertyStatus.ACTIVE}),
    PropertyStatus.SOLD: frozenset(),
}


def check_status_transition(current: str, new: PropertyStatus, strict: bool) -> None:
    """Raise ValidationError when a strict lattice forbids current -> new"""
    if not strict or current == new.value:
        return
    allowed = STATUS_TRANSITIONS.get(PropertyStatus(current), frozenset())
    if new not in allowed:
        raise ValidationError(
            [FieldError(field="status", message=f"Cannot change status from '{current}' to '{new.value}'")],
            message="Invalid status transition",
        )


ANALYTICS_COUNTERS = ("views_count", "inquiries_count", "favorites_count", "shares_count", "search_impressions")


def _bump_daily_counter(db: Session, property_id: str, day: str, column: str) -> int:
    counter = getattr(DBPropertyAnalytics, column)
    result = db.execute(
        update(DBPropertyAnalytics)
        .where(DBPropertyAnalytics.property_id == property_id, DBPropertyAnalytics.date == day)
        .values({column: counter + 1})
    )
    return result.rowcount


def record_daily_activity(db: Session, property_id: str, column: str) -> None:
    """Atomically bump one counter on today's analytics row, creating the row if needed.

    Does not commit; the caller's unit of work does.
    """
    today = utcnow().strftime("%Y-%m-%d")
    if _bump_daily_counter(db, property_id, today, column):
        return

    counters = {name: 0 for name in ANALYTICS_COUNTERS}
    counters[column] = 1
    db.flush()
    try:
        with db.begin_nested():
            db.add(DBPropertyAnalytics(property_id=property_id, date=today, **counters))
    except IntegrityError:
        # Another request created today's row between the update and the insert
        logger.info(f"Analytics row for property {property_id} on {today} already exists, retrying update")
        _bump_daily_counter(db, property_id, today, column)


class PropertyService:
    """Listing CRUD, photos, views and owner-only reports"""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    def _get_property(self, property_id: str) -> DBProperty:
        db_property = self.db.get(DBProperty, property_id)
        if db_property is None:
            raise NotFoundError("Property not found")
        return db_property

    def _get_owned_property(self, property_id: str, identity: Identity) -> DBProperty:
        db_property = self._get_property(property_id)
        if db_property.user_id != identity.user_id:
            raise PermissionDeniedError("Not authorized to manage this property")
        return db_property

    def _detail(self, property_id: str) -> PropertyDetail:
        db_property = self.db.scalar(
            select(DBProperty)
            .options(joinedload(DBProperty.owner), selectinload(DBProperty.photos))
            .where(DBProperty.id == property_id)
            .execution_options(populate_existing=True)
        )
        return PropertyDetail.model_validate(db_property)

    async def create_property(self, identity: Identity, data: PropertyCreate) -> PropertyDetail:
        now = utcnow()
        db_property = DBProperty(
            user_id=identity.user_id,
            status=PropertyStatus.ACTIVE.value,
            view_count=0,
            inquiry_count=0,
            favorite_count=0,
            is_featured=False,
            created_at=now,
            updated_at=now,
            expires_at=now + timedelta(days=data.listing_duration_days),
            **data.model_dump(mode="json"),
        )
        self.db.add(db_property)
        commit_or_raise(self.db, "create property")

        logger.info(f"Property {db_property.id} listed by user {identity.user_id}")
        return self._detail(db_property.id)

    async def get_property(
        self,
        property_id: str,
        identity: Optional[Identity] = None,
        session_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        referrer_url: Optional[str] = None,
    ) -> PropertyDetail:
        """Property detail; each read counts as a view"""
        self._get_property(property_id)

        self.db.execute(
            update(DBProperty)
            .where(DBProperty.id == property_id)
            .values(view_count=DBProperty.view_count + 1)
        )
        if identity is not None or session_id:
            self.db.add(DBPropertyView(
                property_id=property_id,
                user_id=identity.user_id if identity else None,
                session_id=session_id,
                ip_address=ip_address,
                user_agent=user_agent,
                referrer_url=referrer_url,
            ))
        record_daily_activity(self.db, property_id, "views_count")
        commit_or_raise(self.db, "record property view")

        return self._detail(property_id)

    async def update_property(self, property_id: str, identity: Identity, data: PropertyUpdate) -> PropertyDetail:
        db_property = self._get_owned_property(property_id, identity)

        changes = data.model_dump(exclude_unset=True, mode="json")
        if not changes:
            raise ValidationError([], message="No fields to update")

        if data.status is not None:
            check_status_transition(db_property.status, data.status, self.settings.STRICT_STATUS_TRANSITIONS)

        if "featured_until" in changes:
            changes["featured_until"] = data.featured_until

        for field, value in changes.items():
            setattr(db_property, field, value)
        db_property.updated_at = utcnow()
        commit_or_raise(self.db, "update property")

        logger.info(f"Property {property_id} updated: {sorted(changes)}")
        return self._detail(property_id)

    async def delete_property(self, property_id: str, identity: Identity) -> None:
        db_property = self._get_owned_property(property_id, identity)
        self.db.delete(db_property)
        commit_or_raise(self.db, "delete property")
        logger.info(f"Property {property_id} deleted by user {identity.user_id}")

    async def track_view(
        self,
        property_id: str,
        data: PropertyViewCreate,
        identity: Optional[Identity] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        """Explicit view event sent by the client"""
        self._get_property(property_id)
        self.db.add(DBPropertyView(
            property_id=property_id,
            user_id=identity.user_id if identity else None,
            session_id=data.session_id,
            ip_address=ip_address,
            user_agent=user_agent,
            referrer_url=data.referrer_url,
            view_duration_seconds=data.view_duration_seconds,
        ))
        commit_or_raise(self.db, "track property view")

    # Photos

    async def list_photos(self, property_id: str) -> List[PropertyPhoto]:
        db_property = self._get_property(property_id)
        return [PropertyPhoto.model_validate(photo) for photo in db_property.photos]

    def _clear_primary(self, property_id: str) -> None:
        self.db.execute(
            update(DBPropertyPhoto)
            .where(DBPropertyPhoto.property_id == property_id)
            .values(is_primary=False)
        )

    async def add_photo(self, property_id: str, identity: Identity, data: PropertyPhotoCreate) -> PropertyPhoto:
        self._get_owned_property(property_id, identity)

        if data.is_primary:
            self._clear_primary(property_id)

        values = data.model_dump(mode="json")
        db_photo = DBPropertyPhoto(property_id=property_id, **values)
        self.db.add(db_photo)
        commit_or_raise(self.db, "add property photo")
        self.db.refresh(db_photo)
        return PropertyPhoto.model_validate(db_photo)

    def _get_photo(self, property_id: str, photo_id: str) -> DBPropertyPhoto:
        db_photo = self.db.get(DBPropertyPhoto, photo_id)
        if db_photo is None or db_photo.property_id != property_id:
            raise NotFoundError("Photo not found")
        return db_photo

    async def update_photo(
        self,
        property_id: str,
        photo_id: str,
        identity: Identity,
        data: PropertyPhotoUpdate,
    ) -> PropertyPhoto:
        self._get_owned_property(property_id, identity)
        db_photo = self._get_photo(property_id, photo_id)

        changes = data.model_dump(exclude_unset=True, mode="json")
        if not changes:
            raise ValidationError([], message="No fields to update")

        if changes.get("is_primary"):
            self._clear_primary(property_id)
            self.db.refresh(db_photo)

        for field, value in changes.items():
            setattr(db_photo, field, value)
        commit_or_raise(self.db, "update property photo")
        self.db.refresh(db_photo)
        return PropertyPhoto.model_validate(db_photo)

    async def delete_photo(self, property_id: str, photo_id: str, identity: Identity) -> None:
        self._get_owned_property(property_id, identity)
        db_photo = self._get_photo(property_id, photo_id)
        self.db.delete(db_photo)
        commit_or_raise(self.db, "delete property photo")

    # Owner reports

    async def list_property_inquiries(
        self,
        property_id: str,
        identity: Identity,
        status: Optional[InquiryStatus] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> InquiryPage:
        db_property = self._get_owned_property(property_id, identity)

        conditions = [DBPropertyInquiry.property_id == property_id]
        if status is not None:
            conditions.append(DBPropertyInquiry.status == status.value)

        total_count = self.db.scalar(
            select(func.count()).select_from(DBPropertyInquiry).where(*conditions)
        )
        rows = self.db.scalars(
            select(DBPropertyInquiry)
            .where(*conditions)
            .order_by(DBPropertyInquiry.created_at.desc(), DBPropertyInquiry.id)
            .offset(offset)
            .limit(limit)
        ).all()

        inquiries = [
            InquiryWithProperty.model_validate(row).model_copy(update={
                "property_title": db_property.title,
                "property_price": db_property.price,
                "property_country": db_property.country,
            })
            for row in rows
        ]
        return InquiryPage(inquiries=inquiries, total_count=total_count or 0)

    async def get_analytics(
        self,
        property_id: str,
        identity: Identity,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        limit: int = 30,
        offset: int = 0,
    ) -> List[PropertyAnalytics]:
        """Daily rollups, newest first; dates are YYYY-MM-DD strings"""
        self._get_owned_property(property_id, identity)

        conditions = [DBPropertyAnalytics.property_id == property_id]
        if date_from:
            conditions.append(DBPropertyAnalytics.date >= date_from)
        if date_to:
            conditions.append(DBPropertyAnalytics.date <= date_to)

        rows = self.db.scalars(
            select(DBPropertyAnalytics)
            .where(*conditions)
            .order_by(DBPropertyAnalytics.date.desc(), DBPropertyAnalytics.id)
            .offset(offset)
            .limit(limit)
        ).all()
        return [PropertyAnalytics.model_validate(row) for row in rows]
