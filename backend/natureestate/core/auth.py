from datetime import timedelta
from typing import Any, Dict, Optional
import logging
import secrets

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from natureestate.core.config import Settings, get_app_settings
from natureestate.core.database import get_db
from natureestate.core.errors import AuthError
from natureestate.db.models import User as DBUser, UserSession as DBUserSession, utcnow

logger = logging.getLogger(__name__)

# auto_error=False so a missing header surfaces as AuthError instead of FastAPI's 403
security = HTTPBearer(auto_error=False)


class Identity(BaseModel):
    """Authenticated caller resolved from a bearer token"""
    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str
    name: str
    user_type: str
    session_id: Optional[str] = None


class AuthService:
    """Password hashing and JWT helpers"""

    pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

    @classmethod
    def get_password_hash(cls, password: str) -> str:
        return cls.pwd_context.hash(password)

    @classmethod
    def verify_password(cls, plain_password: str, hashed_password: str) -> bool:
        return cls.pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def generate_token() -> str:
        """Opaque token for refresh, verification and reset flows"""
        return secrets.token_hex(32)

    @staticmethod
    def create_access_token(
        data: Dict[str, Any],
        settings: Settings,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        to_encode = dict(data)
        expire = utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
        to_encode["exp"] = expire
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def decode_access_token(token: str, settings: Settings) -> Dict[str, Any]:
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except JWTError as e:
            logger.debug(f"Rejected access token: {e}")
            raise AuthError("Invalid or expired token")

        if not payload.get("sub"):
            raise AuthError("Invalid or expired token")
        return payload


def resolve_identity(token: str, db: Session, settings: Settings) -> Identity:
    """Decode a token and check that its session and user are still live"""
    payload = AuthService.decode_access_token(token, settings)

    session_id = payload.get("sid")
    if session_id:
        db_session = db.get(DBUserSession, session_id)
        if db_session is None or not db_session.is_active or db_session.expires_at <= utcnow():
            raise AuthError("Session expired or revoked")

    db_user = db.get(DBUser, payload["sub"])
    if db_user is None:
        raise AuthError("User not found")

    return Identity(
        user_id=db_user.id,
        email=db_user.email,
        name=db_user.name,
        user_type=db_user.user_type,
        session_id=session_id,
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> Identity:
    """Dependency: the authenticated caller, AuthError otherwise"""
    if credentials is None:
        raise AuthError("Access token required")
    return resolve_identity(credentials.credentials, db, settings)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> Optional[Identity]:
    """Dependency: the caller if a valid token is present, None otherwise"""
    if credentials is None:
        return None
    try:
        return resolve_identity(credentials.credentials, db, settings)
    except AuthError:
        return None
