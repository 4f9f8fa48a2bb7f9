from fastapi import Header, Depends
from sqlalchemy.orm import Session
from passlib.context import CryptContext
from datetime import datetime, timedelta
import logging
import uuid
from typing import Optional

from database import get_db
from models import User, UserSession
from config import settings
from storage.errors import Unauthorized, to_http_exception

logger = logging.getLogger(__name__)

TOKEN_HEADER = "X-Token"

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password"""
    return pwd_context.hash(password)


class SessionResolver:
    """Maps an opaque client token to a user id through the session table.

    Absence is a normal outcome: unknown, missing and expired tokens all
    resolve to ``None`` and callers decide what that means.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def resolve(self, token: Optional[str]) -> Optional[int]:
        if not token:
            return None
        session = self.db.get(UserSession, token)
        if session is None:
            return None
        if session.expires_at <= datetime.utcnow():
            return None
        return session.user_id

    def open(self, user_id: int) -> str:
        """Create a session for ``user_id`` and return its token."""
        now = datetime.utcnow()
        token = str(uuid.uuid4())
        self.db.add(
            UserSession(
                token=token,
                user_id=user_id,
                created_at=now,
                expires_at=now + timedelta(seconds=settings.SESSION_TTL_SECONDS),
            )
        )
        self.db.commit()
        logger.debug(f"Opened session for user {user_id}")
        return token

    def close(self, token: str) -> bool:
        session = self.db.get(UserSession, token)
        if session is None:
            return False
        self.db.delete(session)
        self.db.commit()
        return True


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get user by email"""
    return db.query(User).filter(User.email == email).first()


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


def _user_for_token(token: Optional[str], db: Session) -> Optional[User]:
    user_id = SessionResolver(db).resolve(token)
    if user_id is None:
        return None
    return db.get(User, user_id)


def get_current_user(
    token: Optional[str] = Header(None, alias=TOKEN_HEADER),
    db: Session = Depends(get_db)
) -> User:
    """Get current user from session token"""
    user = _user_for_token(token, db)
    if not user:
        raise to_http_exception(Unauthorized())
    return user


def get_current_user_optional(
    token: Optional[str] = Header(None, alias=TOKEN_HEADER),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """Get current user from session token (optional - returns None if not authenticated)"""
    return _user_for_token(token, db)
