"""SQLAlchemy declarative base and model imports for Alembic."""
from inkwell.db.session import Base  # noqa: F401
from inkwell.models.user import User  # noqa: F401
from inkwell.models.poem import Poem  # noqa: F401
from inkwell.models.comment import Comment  # noqa: F401
from inkwell.models.engagement import Follow, Like  # noqa: F401

__all__ = ["Base", "User", "Poem", "Comment", "Follow", "Like"]
