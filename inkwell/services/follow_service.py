"""Follow graph: toggle, counts and listings."""
import logging
from uuid import UUID

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.models.engagement import Follow
from inkwell.models.user import User
from inkwell.schemas.user import UserProfile

logger = logging.getLogger(__name__)


class SelfFollowError(ValueError):
    """Raised when a user tries to follow themselves."""


async def is_following(db: AsyncSession, follower_id: UUID, following_id: UUID) -> bool:
    result = await db.execute(
        select(Follow).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        )
    )
    return result.scalar_one_or_none() is not None


async def get_follow_counts(db: AsyncSession, user_id: UUID) -> tuple[int, int]:
    """Return (followers_count, following_count)."""
    followers = await db.scalar(select(func.count()).select_from(Follow).where(Follow.following_id == user_id))
    following = await db.scalar(select(func.count()).select_from(Follow).where(Follow.follower_id == user_id))
    return followers or 0, following or 0


async def toggle_follow(db: AsyncSession, follower: User, target: User) -> bool:
    """Follow target if not yet following, otherwise unfollow. Returns the new state."""
    if follower.id == target.id:
        raise SelfFollowError("Cannot follow yourself")
    result = await db.execute(
        select(Follow).where(
            Follow.follower_id == follower.id,
            Follow.following_id == target.id,
        )
    )
    follow = result.scalar_one_or_none()
    if follow:
        await db.delete(follow)
        following = False
    else:
        db.add(Follow(follower_id=follower.id, following_id=target.id))
        following = True
    await db.flush()
    logger.info("[Follow] %s %s %s", follower.id, "followed" if following else "unfollowed", target.id)
    return following


async def get_followers(db: AsyncSession, user_id: UUID, skip: int = 0, limit: int = 50) -> list[User]:
    result = await db.execute(
        select(User)
        .join(Follow, Follow.follower_id == User.id)
        .where(Follow.following_id == user_id)
        .order_by(desc(Follow.created_at))
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_following(db: AsyncSession, user_id: UUID, skip: int = 0, limit: int = 50) -> list[User]:
    result = await db.execute(
        select(User)
        .join(Follow, Follow.following_id == User.id)
        .where(Follow.follower_id == user_id)
        .order_by(desc(Follow.created_at))
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all())


async def user_to_profile(
    db: AsyncSession,
    user: User,
    viewer_id: UUID | None = None,
) -> UserProfile:
    followers_count, following_count = await get_follow_counts(db, user.id)
    viewing_self = viewer_id is not None and viewer_id == user.id
    return UserProfile(
        id=user.id,
        username=user.username,
        email=user.email if viewing_self else None,
        bio=user.bio or "",
        avatar_url=user.avatar_url or "",
        created_at=user.created_at,
        followers_count=followers_count,
        following_count=following_count,
        is_following=await is_following(db, viewer_id, user.id) if viewer_id and not viewing_self else False,
    )
