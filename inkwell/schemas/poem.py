"""Pydantic schemas for Poem."""
from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from inkwell.schemas.user import AuthorSummary

PoemSort = Literal["recent", "popular", "commented", "alphabetical"]


def split_tags(value: str | list[str] | None) -> list[str]:
    """Split a comma-separated tag string (or clean a list), dropping empty tags."""
    if value is None:
        return []
    parts = value.split(",") if isinstance(value, str) else value
    return [tag.strip() for tag in parts if tag and tag.strip()]


class PoemCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=100)
    tags: list[str] = []

    @field_validator("title", "content", "category")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, v):
        return split_tags(v)


class PoemUpdate(BaseModel):
    """Partial edit; empty or missing fields keep their current value."""
    title: str | None = Field(None, max_length=255)
    content: str | None = None
    category: str | None = Field(None, max_length=100)
    tags: list[str] | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, v):
        if v is None:
            return None
        return split_tags(v)


class PoemResponse(BaseModel):
    id: UUID
    title: str
    content: str
    category: str
    tags: list[str] = []
    image_url: str = ""
    author_id: UUID
    author: AuthorSummary | None = None
    likes_count: int = 0
    comments_count: int = 0
    is_featured: bool = False
    is_liked: bool = False
    created_at: datetime
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class LikeToggleResponse(BaseModel):
    liked: bool
    likes_count: int


class LikeStatusResponse(BaseModel):
    liked: bool


class MessageResponse(BaseModel):
    message: str
