from pydantic import BaseModel, Field, field_validator, ConfigDict
from datetime import datetime
from typing import Optional
import re


USERNAME_PATTERN = r'^[A-Za-z0-9_]+$'


def ensure_password_strength(password: str) -> str:
    """Validate password complexity requirements."""
    if len(password) > 72:
        raise ValueError('Password cannot be longer than 72 characters')
    if not re.search(r'[A-Za-z]', password):
        raise ValueError('Password must contain a letter')
    if not re.search(r'[0-9]', password):
        raise ValueError('Password must contain digit')
    return password


# Schema for user registration
class UserRegister(BaseModel):
    username: str = Field(..., min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    password: str = Field(..., min_length=8)
    display_name: Optional[str] = Field(None, min_length=1, max_length=100)

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        return ensure_password_strength(v)


# Schema for user login
class UserLogin(BaseModel):
    username: str = Field(..., min_length=1, max_length=30)
    password: str
    remember_me: bool = False


class UserResponse(BaseModel):
    id: int
    username: str
    display_name: str
    is_admin: bool = False
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class MessageResponse(BaseModel):
    message: str
