import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, DateTime, Boolean, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from natureestate.core.database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp; stored the same way on PostgreSQL and SQLite"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Marketplace account (buyer, seller, agent or admin)"""
    __tablename__ = "users"

    id = Column(String(64), primary_key=True, default=new_id)

    # Authentication
    email = Column(String(255), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    email_verification_token = Column(String(64))
    password_reset_token = Column(String(64))
    password_reset_expires = Column(DateTime)

    # Profile
    name = Column(String(255), nullable=False)
    phone = Column(String(50))
    user_type = Column(String(20), nullable=False)
    profile_photo_url = Column(String(1000))
    is_verified = Column(Boolean, nullable=False, default=False)
    email_verified = Column(Boolean, nullable=False, default=False)

    # Preferences
    notification_preferences = Column(Text)
    countries_of_interest = Column(Text)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    last_login_at = Column(DateTime)

    # Relationships
    properties = relationship("Property", back_populates="owner", cascade="all, delete-orphan")
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")
    saved_properties = relationship("SavedProperty", back_populates="user", cascade="all, delete-orphan")
    saved_searches = relationship("SavedSearch", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")
    search_history = relationship("SearchHistory", cascade="all, delete-orphan")
    inquiry_responses = relationship("InquiryResponse", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_users_email', 'email'),
        Index('idx_users_user_type', 'user_type'),
    )


class Property(Base):
    """Listing record; counters are maintained by views, inquiries and saves"""
    __tablename__ = "properties"

    id = Column(String(64), primary_key=True, default=new_id)
    user_id = Column(String(64), ForeignKey('users.id'), nullable=False)

    # Basic listing information
    title = Column(String(500), nullable=False)
    description = Column(Text)
    property_type = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="active")
    price = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")

    # Location
    country = Column(String(100), nullable=False)
    region = Column(String(100))
    city = Column(String(100))
    address = Column(String(500))
    latitude = Column(Float)
    longitude = Column(Float)

    # Dimensions
    square_footage = Column(Float)
    land_size = Column(Float)
    land_size_unit = Column(String(20), default="acres")
    bedrooms = Column(Integer)
    bathrooms = Column(Integer)
    year_built = Column(Integer)

    # Serialized lists, searched by substring
    natural_features = Column(Text)
    outdoor_amenities = Column(Text)
    indoor_amenities = Column(Text)
    view_types = Column(Text)
    nearby_attractions = Column(Text)
    distance_to_landmarks = Column(Text)
    environmental_features = Column(Text)
    outdoor_activities = Column(Text)
    property_condition = Column(String(50))
    special_features = Column(Text)

    # Listing lifecycle
    listing_duration_days = Column(Integer, nullable=False, default=90)
    is_featured = Column(Boolean, nullable=False, default=False)
    featured_until = Column(DateTime)
    view_count = Column(Integer, nullable=False, default=0)
    inquiry_count = Column(Integer, nullable=False, default=0)
    favorite_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    expires_at = Column(DateTime)

    # Relationships
    owner = relationship("User", back_populates="properties")
    photos = relationship(
        "PropertyPhoto",
        back_populates="property",
        cascade="all, delete-orphan",
        order_by="(PropertyPhoto.photo_order, PropertyPhoto.created_at)",
    )
    inquiries = relationship("PropertyInquiry", back_populates="property", cascade="all, delete-orphan")
    saved_by_users = relationship("SavedProperty", back_populates="property", cascade="all, delete-orphan")
    views = relationship("PropertyView", cascade="all, delete-orphan")
    analytics = relationship("PropertyAnalytics", cascade="all, delete-orphan")

    # Indexes for the sortable and filterable columns
    __table_args__ = (
        Index('idx_properties_user_id', 'user_id'),
        Index('idx_properties_status', 'status'),
        Index('idx_properties_country', 'country'),
        Index('idx_properties_property_type', 'property_type'),
        Index('idx_properties_price', 'price'),
        Index('idx_properties_created_at', 'created_at'),
        Index('idx_properties_view_count', 'view_count'),
        Index('idx_properties_title', 'title'),
        Index('idx_properties_square_footage', 'square_footage'),
    )


class PropertyPhoto(Base):
    __tablename__ = "property_photos"

    id = Column(String(64), primary_key=True, default=new_id)
    property_id = Column(String(64), ForeignKey('properties.id'), nullable=False)

    photo_url = Column(String(1000), nullable=False)
    caption = Column(String(500))
    photo_order = Column(Integer, nullable=False, default=0)
    is_primary = Column(Boolean, nullable=False, default=False)
    photo_type = Column(String(20))
    file_size = Column(Integer)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    property = relationship("Property", back_populates="photos")

    __table_args__ = (
        Index('idx_property_photos_property_id', 'property_id'),
        Index('idx_property_photos_primary', 'property_id', 'is_primary'),
    )


class PropertyInquiry(Base):
    """Message from a prospective buyer to a listing owner"""
    __tablename__ = "property_inquiries"

    id = Column(String(64), primary_key=True, default=new_id)
    property_id = Column(String(64), ForeignKey('properties.id'), nullable=False)
    sender_user_id = Column(String(64), ForeignKey('users.id', ondelete="SET NULL"))
    recipient_user_id = Column(String(64), ForeignKey('users.id'), nullable=False)

    sender_name = Column(String(255), nullable=False)
    sender_email = Column(String(255), nullable=False)
    sender_phone = Column(String(50))
    message = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="unread")
    is_interested_in_viewing = Column(Boolean, nullable=False, default=False)
    wants_similar_properties = Column(Boolean, nullable=False, default=False)
    response_message = Column(Text)
    responded_at = Column(DateTime)
    priority = Column(String(10), nullable=False, default="normal")
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    property = relationship("Property", back_populates="inquiries")
    responses = relationship(
        "InquiryResponse",
        back_populates="inquiry",
        cascade="all, delete-orphan",
        order_by="InquiryResponse.created_at",
    )

    __table_args__ = (
        Index('idx_inquiries_property_id', 'property_id'),
        Index('idx_inquiries_recipient', 'recipient_user_id', 'status'),
        Index('idx_inquiries_sender', 'sender_user_id'),
    )


class InquiryResponse(Base):
    __tablename__ = "inquiry_responses"

    id = Column(String(64), primary_key=True, default=new_id)
    inquiry_id = Column(String(64), ForeignKey('property_inquiries.id'), nullable=False)
    sender_user_id = Column(String(64), ForeignKey('users.id'), nullable=False)

    message = Column(Text, nullable=False)
    attachments = Column(Text)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    inquiry = relationship("PropertyInquiry", back_populates="responses")
    sender = relationship("User", overlaps="inquiry_responses")


class SavedProperty(Base):
    """User's saved/favorite properties"""
    __tablename__ = "saved_properties"

    id = Column(String(64), primary_key=True, default=new_id)
    user_id = Column(String(64), ForeignKey('users.id'), nullable=False)
    property_id = Column(String(64), ForeignKey('properties.id'), nullable=False)

    notes = Column(Text)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    user = relationship("User", back_populates="saved_properties")
    property = relationship("Property", back_populates="saved_by_users")

    __table_args__ = (
        Index('idx_saved_properties_user_id', 'user_id'),
        # Unique constraint to prevent duplicate saves
        Index('idx_saved_properties_unique', 'user_id', 'property_id', unique=True),
    )


class SavedSearch(Base):
    """Saved search criteria with alert settings"""
    __tablename__ = "saved_searches"

    id = Column(String(64), primary_key=True, default=new_id)
    user_id = Column(String(64), ForeignKey('users.id'), nullable=False)

    search_name = Column(String(255), nullable=False)
    country = Column(String(100))
    property_type = Column(String(50))
    price_min = Column(Float)
    price_max = Column(Float)
    bedrooms_min = Column(Integer)
    bathrooms_min = Column(Integer)
    square_footage_min = Column(Float)
    square_footage_max = Column(Float)
    land_size_min = Column(Float)
    land_size_max = Column(Float)
    natural_features = Column(Text)
    outdoor_amenities = Column(Text)
    location_text = Column(String(500))

    # Notification settings
    alert_frequency = Column(String(10), nullable=False, default="weekly")
    is_active = Column(Boolean, nullable=False, default=True)
    last_alert_sent = Column(DateTime)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="saved_searches")

    __table_args__ = (
        Index('idx_saved_searches_user_id', 'user_id'),
    )


class SearchHistory(Base):
    __tablename__ = "search_history"

    id = Column(String(64), primary_key=True, default=new_id)
    user_id = Column(String(64), ForeignKey('users.id'))
    session_id = Column(String(100))

    # Snapshot of the filter that was run
    country = Column(String(100))
    property_type = Column(String(50))
    price_min = Column(Float)
    price_max = Column(Float)
    bedrooms_min = Column(Integer)
    bathrooms_min = Column(Integer)
    square_footage_min = Column(Float)
    square_footage_max = Column(Float)
    land_size_min = Column(Float)
    land_size_max = Column(Float)
    natural_features = Column(Text)
    outdoor_amenities = Column(Text)
    location_text = Column(String(500))
    sort_by = Column(String(50))
    results_count = Column(Integer)

    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_search_history_user_id', 'user_id', 'created_at'),
    )


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(64), primary_key=True, default=new_id)
    user_id = Column(String(64), ForeignKey('users.id'), nullable=False)

    type = Column(String(20), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    related_property_id = Column(String(64), ForeignKey('properties.id', ondelete="SET NULL"))
    related_inquiry_id = Column(String(64), ForeignKey('property_inquiries.id', ondelete="SET NULL"))
    is_read = Column(Boolean, nullable=False, default=False)
    is_email_sent = Column(Boolean, nullable=False, default=False)
    email_sent_at = Column(DateTime)
    action_url = Column(String(1000))
    priority = Column(String(10), nullable=False, default="normal")
    expires_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    user = relationship("User", back_populates="notifications")

    __table_args__ = (
        Index('idx_notifications_user_id', 'user_id', 'is_read'),
    )


class PropertyView(Base):
    __tablename__ = "property_views"

    id = Column(String(64), primary_key=True, default=new_id)
    property_id = Column(String(64), ForeignKey('properties.id'), nullable=False)
    user_id = Column(String(64), ForeignKey('users.id', ondelete="SET NULL"))
    session_id = Column(String(100))
    ip_address = Column(String(45))
    user_agent = Column(String(500))
    referrer_url = Column(String(1000))
    view_duration_seconds = Column(Integer)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_property_views_property_id', 'property_id', 'created_at'),
    )


class UserSession(Base):
    """Login session backing an issued access token"""
    __tablename__ = "user_sessions"

    id = Column(String(64), primary_key=True, default=new_id)
    user_id = Column(String(64), ForeignKey('users.id'), nullable=False)
    refresh_token = Column(String(64), unique=True)
    device_info = Column(String(500))
    ip_address = Column(String(45))
    is_active = Column(Boolean, nullable=False, default=True)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    last_activity_at = Column(DateTime, nullable=False, default=utcnow)

    user = relationship("User", back_populates="sessions")

    __table_args__ = (
        Index('idx_user_sessions_user_id', 'user_id'),
    )


class PropertyAnalytics(Base):
    """Daily per-listing rollup"""
    __tablename__ = "property_analytics"

    id = Column(String(64), primary_key=True, default=new_id)
    property_id = Column(String(64), ForeignKey('properties.id'), nullable=False)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD
    views_count = Column(Integer, nullable=False, default=0)
    inquiries_count = Column(Integer, nullable=False, default=0)
    favorites_count = Column(Integer, nullable=False, default=0)
    shares_count = Column(Integer, nullable=False, default=0)
    search_impressions = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_property_analytics_property_date', 'property_id', 'date', unique=True),
    )
