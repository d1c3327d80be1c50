import logging
from jose import jwt
from datetime import timedelta
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session
from skillsync.config import settings
from skillsync.database import get_session
from skillsync.models.user import User, UserRole
from skillsync.utils.clock import utcnow

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()

    expire = utcnow() + (
        expires_delta
        if expires_delta
        else timedelta(minutes=settings.access_token_expire_minutes)
    )

    to_encode.update({"exp": expire})

    return jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.algorithm
    )


def decode_access_token(token: str):
    try:
        return jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
        )
    except jwt.JWTError:
        return None


def _user_from_claims(user_id: str, payload: dict) -> User:
    email = payload.get("email")
    if not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token carries no email address",
        )

    try:
        role = UserRole(payload.get("role") or UserRole.student)
    except ValueError:
        role = UserRole.student

    return User(
        id=user_id,
        email=email,
        name=payload.get("name") or email.split("@")[0],
        image_url=payload.get("image_url"),
        role=role,
    )


def ensure_user(session: Session, user_id: str, payload: dict) -> User:
    """
    Load the local user for a verified identity, creating it on first sight.
    The local role is authoritative once the row exists.
    """
    user = session.get(User, user_id)
    if user:
        return user

    user = _user_from_claims(user_id, payload)
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        # created concurrently by another request
        session.rollback()
        existing = session.get(User, user_id)
        if existing:
            return existing
        raise

    session.refresh(user)
    logger.info("Created local user %s on first sign-in", user_id)
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: Session = Depends(get_session)
) -> User:
    payload = decode_access_token(credentials.credentials) if credentials else None

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub") or payload.get("user_id")

    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload"
        )

    user = ensure_user(session, str(user_id), payload)

    if not user.can_login:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled"
        )

    return user
