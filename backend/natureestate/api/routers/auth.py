from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
import logging

from natureestate.core.auth import Identity, get_current_user
from natureestate.core.config import Settings, get_app_settings
from natureestate.core.database import get_db
from natureestate.models.user import (
    AuthResponse, ForgotPasswordRequest, MessageResponse, RefreshTokenRequest,
    ResetPasswordRequest, UserLogin, UserRegistration, VerifyEmailRequest,
)
from natureestate.modules.users.service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_user_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> UserService:
    return UserService(db, settings)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    user_data: UserRegistration,
    request: Request,
    user_service: UserService = Depends(get_user_service),
):
    """
    Register a new user account.

    Returns the account plus an access token and refresh token for a new
    session. An email verification token is issued alongside.
    """
    return await user_service.register(
        user_data,
        device_info=request.headers.get("user-agent"),
        ip_address=request.client.host if request.client else None,
    )


@router.post("/login", response_model=AuthResponse)
async def login_user(
    login_data: UserLogin,
    request: Request,
    user_service: UserService = Depends(get_user_service),
):
    """Authenticate with email and password and open a session."""
    return await user_service.login(
        login_data.email,
        login_data.password,
        device_info=request.headers.get("user-agent"),
        ip_address=request.client.host if request.client else None,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout_user(
    identity: Identity = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    """Deactivate the session behind the presented token."""
    await user_service.logout(identity)
    return MessageResponse(message="Logout successful")


@router.post("/refresh-token", response_model=AuthResponse)
async def refresh_token(
    token_data: RefreshTokenRequest,
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.refresh_token(token_data.refresh_token)


@router.post("/verify-email", response_model=MessageResponse)
async def verify_email(
    verify_data: VerifyEmailRequest,
    user_service: UserService = Depends(get_user_service),
):
    await user_service.verify_email(verify_data.token)
    return MessageResponse(message="Email verification successful")


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    forgot_data: ForgotPasswordRequest,
    user_service: UserService = Depends(get_user_service),
):
    """Same response whether or not the account exists."""
    await user_service.forgot_password(forgot_data.email)
    return MessageResponse(message="If an account with that email exists, a password reset link has been sent")


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    reset_data: ResetPasswordRequest,
    user_service: UserService = Depends(get_user_service),
):
    await user_service.reset_password(reset_data.token, reset_data.new_password)
    return MessageResponse(message="Password reset successful")
