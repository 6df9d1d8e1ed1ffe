from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from moodflix.database import get_db
from moodflix.schemas.auth import (
    UserRegister,
    UserLogin,
    UserResponse,
    TokenResponse,
    MessageResponse,
)
from moodflix.services.auth_service import AuthService
from moodflix.utils.dependencies import get_current_user, security
from moodflix.models.user import User

# Define router
router = APIRouter(prefix="/api/auth", tags=["Authentication"])


# Register a new user
@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: UserRegister, db: Session = Depends(get_db)):
    """Register a new user with username and password"""
    return AuthService.register_user(db, user_data)


# Login endpoint
@router.post("/login", response_model=TokenResponse)
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """Login with username and password; the token doubles as the user-data session token"""
    return AuthService.login_user(db, credentials)


@router.post("/logout", response_model=MessageResponse)
def logout(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Invalidate the current session"""
    AuthService.logout(db, credentials.credentials)
    return {"message": "Signed out"}


# Get current authenticated user
@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Get current authenticated user"""
    return current_user
