from typing import Optional
from datetime import timedelta
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from natureestate.core.auth import AuthService, Identity
from natureestate.core.config import Settings
from natureestate.core.database import commit_or_raise
from natureestate.core.errors import AuthError, ConflictError, FieldError, NotFoundError, ValidationError
from natureestate.db.models import User as DBUser, UserSession as DBUserSession, utcnow
from natureestate.models.user import (
    AuthResponse, PublicProfile, TokenResponse, User, UserRegistration, UserUpdate,
)

logger = logging.getLogger(__name__)

DEFAULT_NOTIFICATION_PREFERENCES = '{"email": true, "sms": false, "push": true}'


class UserService:
    """Accounts, sessions and the token flows around them"""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    def _get_user(self, user_id: str) -> DBUser:
        db_user = self.db.get(DBUser, user_id)
        if db_user is None:
            raise NotFoundError("User not found")
        return db_user

    def _find_by_email(self, email: str) -> Optional[DBUser]:
        return self.db.scalar(select(DBUser).where(DBUser.email == email.lower()))

    def _open_session(
        self,
        db_user: DBUser,
        device_info: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> TokenResponse:
        """Create a session row and the access token bound to it (no commit)"""
        lifetime = timedelta(minutes=self.settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        db_session = DBUserSession(
            user_id=db_user.id,
            refresh_token=AuthService.generate_token(),
            device_info=device_info[:500] if device_info else None,
            ip_address=ip_address,
            is_active=True,
            expires_at=utcnow() + lifetime,
        )
        self.db.add(db_session)
        self.db.flush()
        return self._issue_tokens(db_user, db_session)

    def _issue_tokens(self, db_user: DBUser, db_session: DBUserSession) -> TokenResponse:
        lifetime = timedelta(minutes=self.settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        access_token = AuthService.create_access_token(
            data={"sub": db_user.id, "sid": db_session.id, "email": db_user.email, "user_type": db_user.user_type},
            settings=self.settings,
            expires_delta=lifetime,
        )
        return TokenResponse(
            access_token=access_token,
            refresh_token=db_session.refresh_token,
            expires_in=int(lifetime.total_seconds()),
        )

    async def register(
        self,
        data: UserRegistration,
        device_info: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> AuthResponse:
        email = data.email.lower()
        if self._find_by_email(email) is not None:
            raise ConflictError("User with this email already exists")

        verification_token = AuthService.generate_token()
        db_user = DBUser(
            email=email,
            hashed_password=AuthService.get_password_hash(data.password),
            name=data.name,
            phone=data.phone,
            user_type=data.user_type.value,
            profile_photo_url=data.profile_photo_url,
            is_verified=False,
            email_verified=False,
            email_verification_token=verification_token,
            notification_preferences=data.notification_preferences or DEFAULT_NOTIFICATION_PREFERENCES,
            countries_of_interest=data.countries_of_interest,
        )
        self.db.add(db_user)
        self.db.flush()

        tokens = self._open_session(db_user, device_info, ip_address)
        commit_or_raise(self.db, "register user")
        self.db.refresh(db_user)

        # Delivery belongs to the email collaborator
        logger.info(f"User {db_user.id} registered; verification token issued")
        logger.debug(f"Verification token for {email}: {verification_token}")

        return AuthResponse(user=User.model_validate(db_user), **tokens.model_dump())

    async def login(
        self,
        email: str,
        password: str,
        device_info: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> AuthResponse:
        db_user = self._find_by_email(email)
        if db_user is None or not AuthService.verify_password(password, db_user.hashed_password):
            raise AuthError("Invalid email or password")

        db_user.last_login_at = utcnow()
        tokens = self._open_session(db_user, device_info, ip_address)
        commit_or_raise(self.db, "log in")
        self.db.refresh(db_user)

        logger.info(f"User {db_user.id} logged in")
        return AuthResponse(user=User.model_validate(db_user), **tokens.model_dump())

    async def logout(self, identity: Identity) -> None:
        if identity.session_id is None:
            return
        db_session = self.db.get(DBUserSession, identity.session_id)
        if db_session is not None:
            db_session.is_active = False
            commit_or_raise(self.db, "log out")
        logger.info(f"User {identity.user_id} logged out")

    async def refresh_token(self, refresh_token: str) -> AuthResponse:
        """Rotate the refresh token of a live session and issue a new access token"""
        db_session = self.db.scalar(
            select(DBUserSession).where(
                DBUserSession.refresh_token == refresh_token,
                DBUserSession.is_active.is_(True),
            )
        )
        if db_session is None:
            raise AuthError("Invalid refresh token")
        if db_session.expires_at < utcnow():
            raise AuthError("Refresh token expired")

        db_user = self.db.get(DBUser, db_session.user_id)
        if db_user is None:
            raise AuthError("User not found")

        now = utcnow()
        db_session.refresh_token = AuthService.generate_token()
        db_session.expires_at = now + timedelta(minutes=self.settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        db_session.last_activity_at = now
        self.db.flush()
        tokens = self._issue_tokens(db_user, db_session)
        commit_or_raise(self.db, "refresh token")

        return AuthResponse(user=User.model_validate(db_user), **tokens.model_dump())

    async def verify_email(self, token: str) -> None:
        db_user = self.db.scalar(select(DBUser).where(DBUser.email_verification_token == token))
        if db_user is None:
            raise ValidationError([FieldError(field="token", message="Invalid verification token")],
                                  message="Invalid verification token")

        db_user.email_verified = True
        db_user.is_verified = True
        db_user.email_verification_token = None
        commit_or_raise(self.db, "verify email")
        logger.info(f"User {db_user.id} verified their email")

    async def forgot_password(self, email: str) -> None:
        """Issue a reset token; silent when the account does not exist"""
        db_user = self._find_by_email(email)
        if db_user is None:
            logger.info("Password reset requested for unknown email")
            return

        reset_token = AuthService.generate_token()
        db_user.password_reset_token = reset_token
        db_user.password_reset_expires = utcnow() + timedelta(minutes=self.settings.PASSWORD_RESET_EXPIRE_MINUTES)
        commit_or_raise(self.db, "request password reset")

        logger.info(f"Password reset token issued for user {db_user.id}")
        logger.debug(f"Password reset token for {db_user.email}: {reset_token}")

    async def reset_password(self, token: str, new_password: str) -> None:
        db_user = self.db.scalar(
            select(DBUser).where(
                DBUser.password_reset_token == token,
                DBUser.password_reset_expires > utcnow(),
            )
        )
        if db_user is None:
            raise ValidationError([FieldError(field="token", message="Invalid or expired reset token")],
                                  message="Invalid or expired reset token")

        db_user.hashed_password = AuthService.get_password_hash(new_password)
        db_user.password_reset_token = None
        db_user.password_reset_expires = None
        commit_or_raise(self.db, "reset password")
        logger.info(f"Password reset for user {db_user.id}")

    async def get_me(self, identity: Identity) -> User:
        return User.model_validate(self._get_user(identity.user_id))

    async def update_me(self, identity: Identity, data: UserUpdate) -> User:
        db_user = self._get_user(identity.user_id)

        changes = data.model_dump(exclude_unset=True, mode="json")
        if not changes:
            raise ValidationError([], message="No fields to update")

        if "email" in changes:
            changes["email"] = changes["email"].lower()
            existing = self._find_by_email(changes["email"])
            if existing is not None and existing.id != db_user.id:
                raise ConflictError("User with this email already exists")

        for field, value in changes.items():
            setattr(db_user, field, value)
        commit_or_raise(self.db, "update user")
        self.db.refresh(db_user)
        return User.model_validate(db_user)

    async def delete_me(self, identity: Identity) -> None:
        db_user = self._get_user(identity.user_id)
        self.db.delete(db_user)
        commit_or_raise(self.db, "delete user")
        logger.info(f"User {identity.user_id} deleted their account")

    async def get_public_profile(self, user_id: str) -> PublicProfile:
        return PublicProfile.model_validate(self._get_user(user_id))
