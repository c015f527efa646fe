"""Poem business logic: CRUD, listing, likes and counter upkeep."""
import logging
from uuid import UUID

from sqlalchemy import asc, delete, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from inkwell.models.comment import Comment
from inkwell.models.engagement import Like
from inkwell.models.poem import Poem
from inkwell.schemas.poem import PoemCreate, PoemResponse, PoemSort, PoemUpdate
from inkwell.schemas.user import AuthorSummary, UserStats

logger = logging.getLogger(__name__)

FEATURED_LIMIT = 3
TRENDING_LIMIT = 6

_SORT_ORDERS = {
    "recent": (desc(Poem.created_at),),
    "popular": (desc(Poem.likes_count), desc(Poem.created_at)),
    "commented": (desc(Poem.comments_count), desc(Poem.created_at)),
    "alphabetical": (asc(Poem.title), desc(Poem.created_at)),
}


def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _tag_matches(dialect: str, pattern: str):
    """EXISTS over the poem's tag array, matching each tag on its own."""
    if dialect == "postgresql":
        tags = func.jsonb_array_elements_text(Poem.tags).table_valued("value")
    else:
        tags = func.json_each(Poem.tags).table_valued("value")
    return select(1).select_from(tags).where(tags.c.value.ilike(pattern, escape="\\")).exists()


async def create_poem(db: AsyncSession, author_id: UUID, data: PoemCreate, image_url: str = "") -> Poem:
    poem = Poem(
        author_id=author_id,
        title=data.title,
        content=data.content,
        category=data.category,
        tags=data.tags,
        image_url=image_url,
        likes_count=0,
        comments_count=0,
        is_featured=False,
    )
    db.add(poem)
    await db.flush()
    logger.info("[Poems] Created %s by %s", poem.id, author_id)
    return poem


async def get_poem(db: AsyncSession, poem_id: UUID) -> Poem | None:
    result = await db.execute(
        select(Poem)
        .where(Poem.id == poem_id)
        .options(selectinload(Poem.author))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def update_poem(db: AsyncSession, poem: Poem, data: PoemUpdate) -> Poem:
    if data.title:
        poem.title = data.title
    if data.content:
        poem.content = data.content
    if data.category:
        poem.category = data.category
    if data.tags is not None:
        poem.tags = data.tags
    await db.flush()
    return poem


async def delete_poem(db: AsyncSession, poem: Poem) -> None:
    """Delete a poem together with its comments and likes."""
    await db.execute(delete(Comment).where(Comment.poem_id == poem.id))
    await db.execute(delete(Like).where(Like.poem_id == poem.id))
    await db.delete(poem)
    await db.flush()
    logger.info("[Poems] Deleted %s", poem.id)


async def list_poems(
    db: AsyncSession,
    *,
    category: str | None = None,
    search: str | None = None,
    sort: PoemSort = "recent",
    skip: int = 0,
    limit: int = 20,
) -> list[Poem]:
    q = select(Poem).options(selectinload(Poem.author))
    if category:
        q = q.where(Poem.category == category)
    if search and search.strip():
        pattern = _like_pattern(search.strip())
        q = q.where(
            or_(
                Poem.title.ilike(pattern, escape="\\"),
                Poem.content.ilike(pattern, escape="\\"),
                _tag_matches(db.bind.dialect.name, pattern),
            )
        )
    q = q.order_by(*_SORT_ORDERS[sort]).offset(skip).limit(limit)
    result = await db.execute(q)
    return list(result.scalars().all())


async def get_featured_poems(db: AsyncSession, limit: int = FEATURED_LIMIT) -> list[Poem]:
    result = await db.execute(
        select(Poem)
        .where(Poem.is_featured.is_(True))
        .order_by(desc(Poem.created_at))
        .limit(limit)
        .options(selectinload(Poem.author))
    )
    return list(result.scalars().all())


async def get_trending_poems(db: AsyncSession, limit: int = TRENDING_LIMIT) -> list[Poem]:
    return await list_poems(db, sort="popular", limit=limit)


async def get_user_poems(db: AsyncSession, author_id: UUID, skip: int = 0, limit: int = 50) -> list[Poem]:
    result = await db.execute(
        select(Poem)
        .where(Poem.author_id == author_id)
        .order_by(desc(Poem.created_at))
        .offset(skip)
        .limit(limit)
        .options(selectinload(Poem.author))
    )
    return list(result.scalars().all())


async def get_user_stats(db: AsyncSession, author_id: UUID) -> UserStats:
    result = await db.execute(
        select(
            func.count(Poem.id),
            func.coalesce(func.sum(Poem.likes_count), 0),
            func.coalesce(func.sum(Poem.comments_count), 0),
        ).where(Poem.author_id == author_id)
    )
    total_poems, total_likes, total_comments = result.one()
    return UserStats(
        total_poems=total_poems or 0,
        total_likes=int(total_likes or 0),
        total_comments=int(total_comments or 0),
    )


async def is_poem_liked(db: AsyncSession, user_id: UUID, poem_id: UUID) -> bool:
    result = await db.execute(select(Like).where(Like.user_id == user_id, Like.poem_id == poem_id))
    return result.scalar_one_or_none() is not None


async def get_user_liked_poem_ids(
    db: AsyncSession,
    user_id: UUID,
    poem_ids: list[UUID],
) -> set[UUID]:
    """Return set of poem IDs that the user has liked."""
    if not poem_ids:
        return set()
    result = await db.execute(
        select(Like.poem_id).where(
            Like.user_id == user_id,
            Like.poem_id.in_(poem_ids),
        )
    )
    return set(row[0] for row in result.all() if row[0])


async def toggle_like(db: AsyncSession, poem: Poem, user_id: UUID) -> bool:
    """Flip the user's like on the poem and move likes_count by one. Returns the new state."""
    result = await db.execute(select(Like).where(Like.user_id == user_id, Like.poem_id == poem.id))
    like = result.scalar_one_or_none()
    if like:
        await db.delete(like)
        poem.likes_count = max(0, (poem.likes_count or 0) - 1)
        liked = False
    else:
        db.add(Like(user_id=user_id, poem_id=poem.id))
        poem.likes_count = (poem.likes_count or 0) + 1
        liked = True
    await db.flush()
    logger.info("[Likes] %s %s poem %s (count=%s)", user_id, "liked" if liked else "unliked", poem.id, poem.likes_count)
    return liked


async def set_featured(db: AsyncSession, poem_id: UUID, featured: bool = True) -> Poem | None:
    poem = await get_poem(db, poem_id)
    if not poem:
        return None
    poem.is_featured = featured
    await db.flush()
    return poem


async def find_likes_count_drift(db: AsyncSession) -> list[tuple[Poem, int]]:
    """Poems whose stored likes_count differs from their number of likes rows."""
    like_counts = (
        select(Like.poem_id, func.count().label("n"))
        .group_by(Like.poem_id)
        .subquery()
    )
    actual = func.coalesce(like_counts.c.n, 0)
    result = await db.execute(
        select(Poem, actual)
        .outerjoin(like_counts, like_counts.c.poem_id == Poem.id)
        .where(Poem.likes_count != actual)
        .order_by(Poem.created_at)
    )
    return [(poem, int(n)) for poem, n in result.all()]


def poem_to_response(poem: Poem, is_liked: bool = False) -> PoemResponse:
    author = poem.author
    author_summary = AuthorSummary(
        id=author.id,
        username=author.username,
        avatar_url=author.avatar_url or "",
    ) if author else None
    return PoemResponse(
        id=poem.id,
        title=poem.title,
        content=poem.content,
        category=poem.category,
        tags=poem.tags or [],
        image_url=poem.image_url or "",
        author_id=poem.author_id,
        author=author_summary,
        likes_count=poem.likes_count or 0,
        comments_count=poem.comments_count or 0,
        is_featured=bool(poem.is_featured),
        is_liked=is_liked,
        created_at=poem.created_at,
        updated_at=poem.updated_at,
    )
