"""Poem model."""
import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from inkwell.db.session import Base


class Poem(Base):
    __tablename__ = "poems"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    author_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    category = Column(String(100), nullable=False, index=True)
    tags = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=list)
    image_url = Column(Text, nullable=False, default="")
    likes_count = Column(Integer, nullable=False, default=0)  # kept equal to len(likes) by toggle_like
    comments_count = Column(Integer, nullable=False, default=0)  # never decremented
    is_featured = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    author = relationship("User", back_populates="poems")
    comments = relationship("Comment", back_populates="poem", cascade="all, delete-orphan")
    likes = relationship("Like", back_populates="poem", cascade="all, delete-orphan")
