from typing import List, Optional
import logging

from sqlalchemy import case, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from natureestate.core.auth import Identity
from natureestate.core.config import Settings
from natureestate.core.errors import AuthError, StorageError
from natureestate.db.models import (
    Property as DBProperty,
    PropertyInquiry as DBPropertyInquiry,
    PropertyView as DBPropertyView,
    SavedProperty as DBSavedProperty,
    SavedSearch as DBSavedSearch,
)
from natureestate.models.dashboard import ActivityItem, DashboardStats
from natureestate.models.inquiry import InquiryStatus
from natureestate.models.property import PropertyStatus
from natureestate.models.user import UserType

logger = logging.getLogger(__name__)

OWNER_ROLES = (UserType.SELLER.value, UserType.AGENT.value)


class DashboardService:
    """Role-dependent rollups scoped to the caller's own rows.

    Sellers and agents get listing and received-inquiry counts; every other
    role gets the buyer view (favorites, sent inquiries, saved searches).
    Nothing here is persisted; stats are recomputed per request.
    """

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    async def get_stats(self, identity: Optional[Identity]) -> DashboardStats:
        if identity is None:
            raise AuthError("Authentication required")

        try:
            if identity.user_type in OWNER_ROLES:
                return self._owner_stats(identity)
            return self._buyer_stats(identity)
        except SQLAlchemyError as e:
            logger.error(f"Dashboard stats failed for user {identity.user_id}: {e}")
            raise StorageError("Failed to load dashboard stats") from e

    def _owner_stats(self, identity: Identity) -> DashboardStats:
        totals = self.db.execute(
            select(
                func.count(DBProperty.id),
                func.coalesce(func.sum(case((DBProperty.status == PropertyStatus.ACTIVE.value, 1), else_=0)), 0),
                func.coalesce(func.sum(DBProperty.view_count), 0),
                func.coalesce(func.sum(DBProperty.favorite_count), 0),
            ).where(DBProperty.user_id == identity.user_id)
        ).one()

        received = DBPropertyInquiry.recipient_user_id == identity.user_id
        inquiry_totals = self.db.execute(
            select(
                func.count(DBPropertyInquiry.id),
                func.coalesce(func.sum(case((DBPropertyInquiry.status == InquiryStatus.UNREAD.value, 1), else_=0)), 0),
            ).where(received)
        ).one()

        limit = self.settings.RECENT_ACTIVITY_LIMIT
        activity: List[ActivityItem] = []

        inquiries = self.db.execute(
            select(DBPropertyInquiry, DBProperty.title)
            .join(DBProperty, DBPropertyInquiry.property_id == DBProperty.id)
            .where(received)
            .order_by(DBPropertyInquiry.created_at.desc(), DBPropertyInquiry.id)
            .limit(limit)
        ).all()
        for inquiry, title in inquiries:
            activity.append(ActivityItem(
                type="inquiry",
                description=f"New inquiry from {inquiry.sender_name}",
                property_id=inquiry.property_id,
                property_title=title,
                timestamp=inquiry.created_at,
            ))

        views = self.db.execute(
            select(DBPropertyView, DBProperty.title)
            .join(DBProperty, DBPropertyView.property_id == DBProperty.id)
            .where(DBProperty.user_id == identity.user_id)
            .order_by(DBPropertyView.created_at.desc(), DBPropertyView.id)
            .limit(limit)
        ).all()
        for view, title in views:
            activity.append(ActivityItem(
                type="property_view",
                description="Property viewed",
                property_id=view.property_id,
                property_title=title,
                timestamp=view.created_at,
            ))

        return DashboardStats(
            user_type=identity.user_type,
            total_properties=totals[0],
            active_listings=int(totals[1]),
            total_views=int(totals[2]),
            total_favorites=int(totals[3]),
            total_inquiries=inquiry_totals[0],
            pending_inquiries=int(inquiry_totals[1]),
            recent_activity=self._most_recent(activity),
        )

    def _buyer_stats(self, identity: Identity) -> DashboardStats:
        total_favorites = self.db.scalar(
            select(func.count()).select_from(DBSavedProperty).where(DBSavedProperty.user_id == identity.user_id)
        )
        total_inquiries = self.db.scalar(
            select(func.count()).select_from(DBPropertyInquiry).where(
                DBPropertyInquiry.sender_user_id == identity.user_id
            )
        )
        saved_searches = self.db.scalar(
            select(func.count()).select_from(DBSavedSearch).where(DBSavedSearch.user_id == identity.user_id)
        )

        limit = self.settings.RECENT_ACTIVITY_LIMIT
        activity: List[ActivityItem] = []

        sent = self.db.execute(
            select(DBPropertyInquiry, DBProperty.title)
            .join(DBProperty, DBPropertyInquiry.property_id == DBProperty.id)
            .where(DBPropertyInquiry.sender_user_id == identity.user_id)
            .order_by(DBPropertyInquiry.created_at.desc(), DBPropertyInquiry.id)
            .limit(limit)
        ).all()
        for inquiry, title in sent:
            activity.append(ActivityItem(
                type="inquiry_sent",
                description="Inquiry sent for property",
                property_id=inquiry.property_id,
                property_title=title,
                timestamp=inquiry.created_at,
            ))

        saved = self.db.execute(
            select(DBSavedProperty, DBProperty.title)
            .join(DBProperty, DBSavedProperty.property_id == DBProperty.id)
            .where(DBSavedProperty.user_id == identity.user_id)
            .order_by(DBSavedProperty.created_at.desc(), DBSavedProperty.id)
            .limit(limit)
        ).all()
        for saved_property, title in saved:
            activity.append(ActivityItem(
                type="property_saved",
                description="Property saved to favorites",
                property_id=saved_property.property_id,
                property_title=title,
                timestamp=saved_property.created_at,
            ))

        return DashboardStats(
            user_type=identity.user_type,
            total_favorites=total_favorites or 0,
            total_inquiries=total_inquiries or 0,
            saved_searches=saved_searches or 0,
            recent_activity=self._most_recent(activity),
        )

    def _most_recent(self, activity: List[ActivityItem]) -> List[ActivityItem]:
        activity.sort(key=lambda item: item.timestamp, reverse=True)
        return activity[:self.settings.RECENT_ACTIVITY_LIMIT]
