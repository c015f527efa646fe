"""Pydantic schemas for Comment."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from inkwell.schemas.user import AuthorSummary


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1)
    parent_id: UUID | None = Field(None, alias="parentId")

    model_config = {"populate_by_name": True}

    @field_validator("content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class CommentResponse(BaseModel):
    id: UUID
    poem_id: UUID
    author_id: UUID
    content: str
    created_at: datetime
    parent_id: UUID | None = None
    author: AuthorSummary | None = None
    replies: list["CommentResponse"] = []

    model_config = {"from_attributes": True}
