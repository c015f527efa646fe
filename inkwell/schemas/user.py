"""Pydantic schemas for User."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)


class AuthorSummary(BaseModel):
    """Author fields embedded in poems and comments."""
    id: UUID
    username: str
    avatar_url: str = ""

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    id: UUID
    username: str
    email: str | None = None  # Only in own profile
    bio: str = ""
    avatar_url: str = ""
    created_at: datetime

    model_config = {"from_attributes": True}


class UserProfile(UserResponse):
    followers_count: int = 0
    following_count: int = 0
    is_following: bool = False  # Set by API when viewer is authenticated


class UserStats(BaseModel):
    total_poems: int = 0
    total_likes: int = 0
    total_comments: int = 0


class FollowToggleResponse(BaseModel):
    following: bool
    followers_count: int


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse


class TokenRefresh(BaseModel):
    refresh_token: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
