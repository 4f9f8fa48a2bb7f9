import base64
import binascii
import logging
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, Header, HTTPException, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth import (
    TOKEN_HEADER,
    SessionResolver,
    authenticate_user,
    get_current_user,
    get_password_hash,
    get_user_by_email,
)
from database import get_db
from models import TokenResponse, User, UserCreateRequest, UserResponse
from storage.errors import Unauthorized, to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_basic_auth(authorization: Optional[str]) -> Optional[Tuple[str, str]]:
    """Decode ``Basic base64(email:password)``; None when the header is unusable."""
    if not authorization:
        return None
    scheme, _, encoded = authorization.partition(" ")
    if scheme.lower() != "basic" or not encoded:
        return None
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        return None
    email, sep, password = decoded.partition(":")
    if not sep or not email:
        return None
    return email, password


@router.post("/users", response_model=UserResponse, status_code=201)
def create_user(payload: UserCreateRequest, db: Session = Depends(get_db)):
    if not payload.email:
        raise HTTPException(status_code=400, detail="Missing email")
    if not payload.password:
        raise HTTPException(status_code=400, detail="Missing password")
    if get_user_by_email(db, payload.email):
        raise HTTPException(status_code=400, detail="Already exist")

    user = User(email=payload.email, password_hash=get_password_hash(payload.password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent signup with the same email
        db.rollback()
        raise HTTPException(status_code=400, detail="Already exist")
    db.refresh(user)
    logger.info(f"Created user {user.id}")
    return user


@router.get("/users/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.get("/connect", response_model=TokenResponse)
def connect(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    credentials = _parse_basic_auth(authorization)
    if credentials is None:
        raise to_http_exception(Unauthorized())
    user = authenticate_user(db, *credentials)
    if user is None:
        raise to_http_exception(Unauthorized())
    token = SessionResolver(db).open(user.id)
    return TokenResponse(token=token)


@router.get("/disconnect", status_code=204)
def disconnect(
    token: Optional[str] = Header(None, alias=TOKEN_HEADER),
    db: Session = Depends(get_db),
):
    resolver = SessionResolver(db)
    if resolver.resolve(token) is None:
        raise to_http_exception(Unauthorized())
    resolver.close(token)
    return Response(status_code=204)
