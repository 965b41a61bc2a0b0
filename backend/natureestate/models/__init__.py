# Pydantic models for API contracts

from .property import (
    PropertyType, PropertyStatus, LandSizeUnit, PropertyCondition, PhotoType,
    PropertyCreate, PropertyUpdate, Property, PropertySummary, PropertyDetail,
    OwnerSummary, PrimaryPhoto, PropertyPhoto, PropertyPhotoCreate, PropertyPhotoUpdate,
    PropertyViewCreate, PropertyAnalytics,
)
from .search import (
    SortBy, SortOrder, PropertyFilter, PagedResult, PropertySearchResponse,
    SearchHistoryCreate, SearchHistoryEntry, SearchHistoryPage,
)
from .user import (
    UserType, AlertFrequency,
    UserRegistration, UserLogin, UserUpdate, User, PublicProfile,
    AuthResponse, TokenResponse, RefreshTokenRequest, VerifyEmailRequest,
    ForgotPasswordRequest, ResetPasswordRequest, MessageResponse,
    SavedSearchCreate, SavedSearchUpdate, SavedSearch,
    SavedPropertyCreate, SavedPropertyUpdate, SavedPropertyEntry, SavedPropertyItem, SavedPropertyPage,
)
from .inquiry import (
    InquiryStatus, Priority, InquirySortBy, InquiryCreate, InquiryUpdate, InquiryFilter,
    Inquiry, InquiryWithProperty, InquiryPage, InquiryResponseCreate, InquiryResponse,
)
from .notification import NotificationType, NotificationSortBy, NotificationFilter, Notification, NotificationPage
from .dashboard import ActivityItem, DashboardStats

__all__ = [
    # Property models
    "PropertyType", "PropertyStatus", "LandSizeUnit", "PropertyCondition", "PhotoType",
    "PropertyCreate", "PropertyUpdate", "Property", "PropertySummary", "PropertyDetail",
    "OwnerSummary", "PrimaryPhoto", "PropertyPhoto", "PropertyPhotoCreate", "PropertyPhotoUpdate",
    "PropertyViewCreate", "PropertyAnalytics",

    # Search models
    "SortBy", "SortOrder", "PropertyFilter", "PagedResult", "PropertySearchResponse",
    "SearchHistoryCreate", "SearchHistoryEntry", "SearchHistoryPage",

    # User models
    "UserType", "AlertFrequency",
    "UserRegistration", "UserLogin", "UserUpdate", "User", "PublicProfile",
    "AuthResponse", "TokenResponse", "RefreshTokenRequest", "VerifyEmailRequest",
    "ForgotPasswordRequest", "ResetPasswordRequest", "MessageResponse",
    "SavedSearchCreate", "SavedSearchUpdate", "SavedSearch",
    "SavedPropertyCreate", "SavedPropertyUpdate", "SavedPropertyEntry", "SavedPropertyItem", "SavedPropertyPage",

    # Inquiry models
    "InquiryStatus", "Priority", "InquirySortBy", "InquiryCreate", "InquiryUpdate", "InquiryFilter",
    "Inquiry", "InquiryWithProperty", "InquiryPage", "InquiryResponseCreate", "InquiryResponse",

    # Notification models
    "NotificationType", "NotificationSortBy", "NotificationFilter", "Notification", "NotificationPage",

    # Dashboard models
    "ActivityItem", "DashboardStats",
]
