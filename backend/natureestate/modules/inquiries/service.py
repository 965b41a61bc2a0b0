from typing import List, Optional
import logging

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from natureestate.core.auth import Identity
from natureestate.core.config import Settings
from natureestate.core.database import commit_or_raise
from natureestate.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from natureestate.db.models import (
    InquiryResponse as DBInquiryResponse,
    Property as DBProperty,
    PropertyInquiry as DBPropertyInquiry,
    utcnow,
)
from natureestate.models.inquiry import (
    Inquiry, InquiryCreate, InquiryFilter, InquiryPage, InquiryResponse, InquiryResponseCreate,
    InquirySortBy, InquiryStatus, InquiryUpdate, InquiryWithProperty,
)
from natureestate.models.notification import NotificationType
from natureestate.models.property import PropertyStatus
from natureestate.modules.notifications.service import NotificationService
from natureestate.modules.properties.service import record_daily_activity

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    InquirySortBy.CREATED_AT: DBPropertyInquiry.created_at,
    InquirySortBy.PRIORITY: DBPropertyInquiry.priority,
    InquirySortBy.STATUS: DBPropertyInquiry.status,
}


def _with_property(row: DBPropertyInquiry) -> InquiryWithProperty:
    return InquiryWithProperty.model_validate(row).model_copy(update={
        "property_title": row.property.title,
        "property_price": row.property.price,
        "property_country": row.property.country,
    })


class InquiryService:
    """Buyer to owner messaging around a listing"""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.notifications = NotificationService(db, settings)

    def _get_inquiry(self, inquiry_id: str) -> DBPropertyInquiry:
        db_inquiry = self.db.get(DBPropertyInquiry, inquiry_id)
        if db_inquiry is None:
            raise NotFoundError("Inquiry not found")
        return db_inquiry

    def _get_participant_inquiry(self, inquiry_id: str, identity: Identity) -> DBPropertyInquiry:
        db_inquiry = self._get_inquiry(inquiry_id)
        if identity.user_id not in (db_inquiry.recipient_user_id, db_inquiry.sender_user_id):
            raise PermissionDeniedError("Not authorized to access this inquiry")
        return db_inquiry

    async def create_inquiry(
        self,
        property_id: str,
        data: InquiryCreate,
        identity: Optional[Identity] = None,
    ) -> Inquiry:
        """Send an inquiry about an active listing; anonymous senders allowed"""
        db_property = self.db.scalar(
            select(DBProperty).where(
                DBProperty.id == property_id,
                DBProperty.status == PropertyStatus.ACTIVE.value,
            )
        )
        if db_property is None:
            raise NotFoundError("Property not found or not available")

        db_inquiry = DBPropertyInquiry(
            property_id=property_id,
            sender_user_id=identity.user_id if identity else None,
            recipient_user_id=db_property.user_id,
            status=InquiryStatus.UNREAD.value,
            **data.model_dump(mode="json"),
        )
        self.db.add(db_inquiry)
        self.db.execute(
            update(DBProperty)
            .where(DBProperty.id == property_id)
            .values(inquiry_count=DBProperty.inquiry_count + 1)
        )
        record_daily_activity(self.db, property_id, "inquiries_count")
        self.db.flush()

        self.notifications.add_notification(
            user_id=db_property.user_id,
            type=NotificationType.INQUIRY,
            title="New Property Inquiry",
            message=f'You have received a new inquiry for "{db_property.title}" from {data.sender_name}.',
            related_property_id=property_id,
            related_inquiry_id=db_inquiry.id,
            action_url=f"/inquiries/{db_inquiry.id}",
            priority=data.priority.value,
        )
        commit_or_raise(self.db, "create inquiry")
        self.db.refresh(db_inquiry)

        logger.info(f"Inquiry {db_inquiry.id} created for property {property_id}")
        return Inquiry.model_validate(db_inquiry)

    async def list_inquiries(self, identity: Identity, criteria: InquiryFilter) -> InquiryPage:
        """Inquiries the caller sent or received"""
        conditions = [or_(
            DBPropertyInquiry.recipient_user_id == identity.user_id,
            DBPropertyInquiry.sender_user_id == identity.user_id,
        )]
        if criteria.status is not None:
            conditions.append(DBPropertyInquiry.status == criteria.status.value)
        if criteria.priority is not None:
            conditions.append(DBPropertyInquiry.priority == criteria.priority.value)
        if criteria.is_interested_in_viewing is not None:
            conditions.append(DBPropertyInquiry.is_interested_in_viewing == criteria.is_interested_in_viewing)
        if criteria.date_from is not None:
            conditions.append(DBPropertyInquiry.created_at >= criteria.date_from)
        if criteria.date_to is not None:
            conditions.append(DBPropertyInquiry.created_at <= criteria.date_to)

        column = SORT_COLUMNS[criteria.sort_by]
        primary = column.asc() if criteria.sort_order == "asc" else column.desc()

        total_count = self.db.scalar(
            select(func.count()).select_from(DBPropertyInquiry).where(*conditions)
        )
        rows = self.db.scalars(
            select(DBPropertyInquiry)
            .where(*conditions)
            .order_by(primary, DBPropertyInquiry.id)
            .offset(criteria.offset)
            .limit(criteria.limit)
        ).all()

        return InquiryPage(inquiries=[_with_property(row) for row in rows], total_count=total_count or 0)

    async def get_inquiry(self, inquiry_id: str, identity: Identity) -> InquiryWithProperty:
        """Inquiry detail; the recipient opening an unread inquiry marks it read"""
        db_inquiry = self._get_inquiry(inquiry_id)
        # Non-participants see the same 404 as a missing inquiry
        if identity.user_id not in (db_inquiry.recipient_user_id, db_inquiry.sender_user_id):
            raise NotFoundError("Inquiry not found")

        if db_inquiry.recipient_user_id == identity.user_id and db_inquiry.status == InquiryStatus.UNREAD.value:
            db_inquiry.status = InquiryStatus.READ.value
            db_inquiry.updated_at = utcnow()
            commit_or_raise(self.db, "mark inquiry read")
            self.db.refresh(db_inquiry)

        return _with_property(db_inquiry)

    async def update_inquiry(self, inquiry_id: str, identity: Identity, data: InquiryUpdate) -> Inquiry:
        db_inquiry = self._get_inquiry(inquiry_id)
        if db_inquiry.recipient_user_id != identity.user_id:
            raise PermissionDeniedError("Not authorized to update this inquiry")

        changes = data.model_dump(exclude_unset=True, mode="json")
        if not changes:
            raise ValidationError([], message="No fields to update")

        for field, value in changes.items():
            setattr(db_inquiry, field, value)
        now = utcnow()
        if data.response_message:
            db_inquiry.responded_at = now
        db_inquiry.updated_at = now
        commit_or_raise(self.db, "update inquiry")
        self.db.refresh(db_inquiry)
        return Inquiry.model_validate(db_inquiry)

    async def list_responses(self, inquiry_id: str, identity: Identity) -> List[InquiryResponse]:
        db_inquiry = self._get_participant_inquiry(inquiry_id, identity)
        return [InquiryResponse.model_validate(response) for response in db_inquiry.responses]

    async def add_response(self, inquiry_id: str, identity: Identity, data: InquiryResponseCreate) -> InquiryResponse:
        """Reply in the thread; the inquiry moves to 'responded'"""
        db_inquiry = self._get_participant_inquiry(inquiry_id, identity)

        db_response = DBInquiryResponse(
            inquiry_id=inquiry_id,
            sender_user_id=identity.user_id,
            message=data.message,
            attachments=data.attachments,
            is_read=False,
        )
        self.db.add(db_response)
        db_inquiry.status = InquiryStatus.RESPONDED.value
        db_inquiry.updated_at = utcnow()
        commit_or_raise(self.db, "add inquiry response")
        self.db.refresh(db_response)
        return InquiryResponse.model_validate(db_response)
