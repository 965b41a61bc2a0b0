from fastapi import APIRouter, Depends, Query, status
from typing import Annotated, List
import logging

from natureestate.api.routers.properties import get_inquiry_service
from natureestate.core.auth import Identity, get_current_user
from natureestate.models.inquiry import (
    Inquiry, InquiryFilter, InquiryPage, InquiryResponse, InquiryResponseCreate,
    InquiryUpdate, InquiryWithProperty,
)
from natureestate.modules.inquiries.service import InquiryService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=InquiryPage)
async def list_inquiries(
    criteria: Annotated[InquiryFilter, Query()],
    identity: Identity = Depends(get_current_user),
    inquiry_service: InquiryService = Depends(get_inquiry_service),
):
    """Inquiries sent or received by the caller."""
    return await inquiry_service.list_inquiries(identity, criteria)


@router.get("/{inquiry_id}", response_model=InquiryWithProperty)
async def get_inquiry(
    inquiry_id: str,
    identity: Identity = Depends(get_current_user),
    inquiry_service: InquiryService = Depends(get_inquiry_service),
):
    """Inquiry detail; opening an unread inquiry as its recipient marks it read."""
    return await inquiry_service.get_inquiry(inquiry_id, identity)


@router.put("/{inquiry_id}", response_model=Inquiry)
async def update_inquiry(
    inquiry_id: str,
    inquiry_data: InquiryUpdate,
    identity: Identity = Depends(get_current_user),
    inquiry_service: InquiryService = Depends(get_inquiry_service),
):
    return await inquiry_service.update_inquiry(inquiry_id, identity, inquiry_data)


@router.get("/{inquiry_id}/responses", response_model=List[InquiryResponse])
async def list_inquiry_responses(
    inquiry_id: str,
    identity: Identity = Depends(get_current_user),
    inquiry_service: InquiryService = Depends(get_inquiry_service),
):
    return await inquiry_service.list_responses(inquiry_id, identity)


@router.post("/{inquiry_id}/responses", response_model=InquiryResponse, status_code=status.HTTP_201_CREATED)
async def add_inquiry_response(
    inquiry_id: str,
    response_data: InquiryResponseCreate,
    identity: Identity = Depends(get_current_user),
    inquiry_service: InquiryService = Depends(get_inquiry_service),
):
    return await inquiry_service.add_response(inquiry_id, identity, response_data)
