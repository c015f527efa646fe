"""Comment threading: top-level comments with one level of replies."""
import logging
from uuid import UUID

from sqlalchemy import asc, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from inkwell.models.comment import Comment
from inkwell.models.poem import Poem
from inkwell.models.user import User
from inkwell.schemas.comment import CommentCreate, CommentResponse
from inkwell.schemas.user import AuthorSummary

logger = logging.getLogger(__name__)


class ReplyDepthError(ValueError):
    """Raised when a reply targets a comment that is itself a reply."""


async def get_comment(db: AsyncSession, comment_id: UUID) -> Comment | None:
    result = await db.execute(select(Comment).where(Comment.id == comment_id))
    return result.scalar_one_or_none()


async def list_poem_comments(db: AsyncSession, poem_id: UUID) -> list[Comment]:
    """Top-level comments, oldest first, with replies and authors loaded."""
    result = await db.execute(
        select(Comment)
        .where(Comment.poem_id == poem_id, Comment.parent_id.is_(None))
        .order_by(asc(Comment.created_at))
        .options(
            selectinload(Comment.author),
            selectinload(Comment.replies).selectinload(Comment.author),
        )
    )
    return list(result.scalars().all())


async def create_comment(
    db: AsyncSession,
    poem: Poem,
    author_id: UUID,
    data: CommentCreate,
) -> Comment | None:
    """Add a comment or reply and bump the poem's comments_count.

    Returns None when parent_id does not name a comment on this poem.
    Raises ReplyDepthError when the parent is itself a reply.
    """
    if data.parent_id:
        parent = await get_comment(db, data.parent_id)
        if not parent or parent.poem_id != poem.id:
            return None
        if parent.parent_id is not None:
            raise ReplyDepthError("Cannot reply to a reply")
    comment = Comment(
        poem_id=poem.id,
        author_id=author_id,
        content=data.content,
        parent_id=data.parent_id,
    )
    db.add(comment)
    poem.comments_count = (poem.comments_count or 0) + 1
    await db.flush()
    logger.info("[Comments] %s on poem %s (parent=%s)", comment.id, poem.id, data.parent_id)
    return comment


def comment_to_response(
    comment: Comment,
    author: User | None = None,
    replies: list[CommentResponse] | None = None,
) -> CommentResponse:
    author = author or comment.author
    author_summary = AuthorSummary(
        id=author.id,
        username=author.username,
        avatar_url=author.avatar_url or "",
    ) if author else None
    return CommentResponse(
        id=comment.id,
        poem_id=comment.poem_id,
        author_id=comment.author_id,
        content=comment.content,
        created_at=comment.created_at,
        parent_id=comment.parent_id,
        author=author_summary,
        replies=replies or [],
    )


def thread_to_response(comment: Comment) -> CommentResponse:
    return comment_to_response(
        comment,
        replies=[comment_to_response(reply) for reply in comment.replies],
    )
