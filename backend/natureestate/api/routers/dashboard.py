from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from natureestate.core.auth import Identity, get_current_user
from natureestate.core.config import Settings, get_app_settings
from natureestate.core.database import get_db
from natureestate.models.dashboard import DashboardStats
from natureestate.modules.dashboard.service import DashboardService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_dashboard_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> DashboardService:
    return DashboardService(db, settings)


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    identity: Identity = Depends(get_current_user),
    dashboard_service: DashboardService = Depends(get_dashboard_service),
):
    """
    Role-dependent counters for the caller.

    Sellers and agents see their listings and received inquiries; buyers see
    favorites, sent inquiries and saved searches.
    """
    return await dashboard_service.get_stats(identity)
