from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class ActivityItem(BaseModel):
    """One row of the dashboard activity feed"""
    type: str  # inquiry, property_view, inquiry_sent, property_saved
    description: str
    property_id: Optional[str] = None
    property_title: Optional[str] = None
    timestamp: datetime


class DashboardStats(BaseModel):
    """Role-scoped rollup; seller/agent fields stay None for buyers and vice versa"""
    user_type: str

    # Seller / agent
    total_properties: Optional[int] = None
    active_listings: Optional[int] = None
    pending_inquiries: Optional[int] = None
    total_views: Optional[int] = None

    # Both roles
    total_inquiries: int = 0
    total_favorites: int = 0

    # Buyer
    saved_searches: Optional[int] = None

    recent_activity: List[ActivityItem] = []
