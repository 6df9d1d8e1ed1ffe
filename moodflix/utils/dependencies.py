from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from moodflix.database import get_db
from moodflix.models.user import User
from moodflix.services.auth_service import AuthService

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


# Dependency to get the current authenticated user
async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    return AuthService.resolve_session(db, credentials.credentials)


# Recommendation calls work anonymously; a valid token only tags the analytics row
async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    db: Session = Depends(get_db)
) -> Optional[User]:
    if credentials is None:
        return None
    try:
        return AuthService.resolve_session(db, credentials.credentials)
    except HTTPException:
        return None


async def get_admin_user(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user
