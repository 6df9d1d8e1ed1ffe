from sqlalchemy.orm import Session
from moodflix.models.user import User, UserSession
from moodflix.schemas.auth import UserRegister, UserLogin
from moodflix.utils.security import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    REMEMBER_ME_EXPIRE_MINUTES,
    create_access_token,
    decode_token,
    hash_password,
    hash_token,
    username_to_email,
    verify_password,
)
from fastapi import HTTPException, status
from datetime import datetime, timedelta, timezone
from typing import Optional, cast
import os
import logging

logger = logging.getLogger(__name__)


def _admin_usernames() -> set:
    raw = os.getenv("ADMIN_USERNAMES", "")
    return {name.strip().lower() for name in raw.split(",") if name.strip()}


def as_utc(moment: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


class AuthService:
    @staticmethod
    def register_user(db: Session, user_data: UserRegister) -> User:
        username = user_data.username.lower()
        existing_user = db.query(User).filter(User.username == username).first()
        if existing_user:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")

        new_user = User(
            username=username,
            email=username_to_email(username),
            password_hash=hash_password(user_data.password),
            display_name=user_data.display_name or user_data.username,
            is_admin=username in _admin_usernames(),
        )
        db.add(new_user)
        db.commit()
        db.refresh(new_user)
        logger.info(f"Registered user {new_user.id} ({username})")
        return new_user

    @staticmethod
    def login_user(db: Session, credentials: UserLogin) -> dict:
        username = credentials.username.lower()
        user = db.query(User).filter(User.email == username_to_email(username)).first()

        if not user or not verify_password(credentials.password, str(user.password_hash)):
            logger.warning(f"Login failed for username {username}")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect username or password")
        if not cast(bool, user.is_active):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated")

        minutes = REMEMBER_ME_EXPIRE_MINUTES if credentials.remember_me else ACCESS_TOKEN_EXPIRE_MINUTES
        expires_delta = timedelta(minutes=minutes)
        access_token = create_access_token(
            data={"sub": user.username, "user_id": user.id},
            expires_delta=expires_delta
        )

        now = datetime.now(timezone.utc)
        db.add(UserSession(
            user_id=user.id,
            token_hash=hash_token(access_token),
            expires_at=now + expires_delta,
        ))
        user.last_login_at = now  # type: ignore
        db.commit()
        db.refresh(user)

        return {
            "access_token": access_token,
            "token_type": "bearer",
            "expires_in": minutes * 60,
            "user": user
        }

    @staticmethod
    def resolve_session(db: Session, token: Optional[str]) -> User:
        """
        Return the user behind a session token.

        The JWT must decode and its hash must still be present in
        user_sessions with a future expiry.
        """
        if not token:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

        payload = decode_token(token)
        if payload is None or payload.get("type") != "access":
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

        session = db.query(UserSession).filter(UserSession.token_hash == hash_token(token)).first()
        if not session or as_utc(session.expires_at) < datetime.now(timezone.utc):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session expired")

        user = db.query(User).filter(User.id == payload.get("user_id")).first()
        if not user or not user.is_active:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found or inactive")
        return user

    @staticmethod
    def logout(db: Session, token: str) -> None:
        deleted = db.query(UserSession).filter(UserSession.token_hash == hash_token(token)).delete()
        db.commit()
        logger.info(f"Logout removed {deleted} session(s)")

    @staticmethod
    def purge_expired_sessions(db: Session) -> int:
        """Delete expired sessions, return how many were removed."""
        now = datetime.now(timezone.utc)
        expired = [
            s for s in db.query(UserSession).all()
            if as_utc(s.expires_at) < now
        ]
        for session in expired:
            db.delete(session)
        db.commit()
        return len(expired)
