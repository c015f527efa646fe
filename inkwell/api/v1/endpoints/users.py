"""User profile, stats and follow endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.api.deps import get_db, get_current_user, get_current_user_optional
from inkwell.models.user import User
from inkwell.schemas.poem import PoemResponse
from inkwell.schemas.user import FollowToggleResponse, UserProfile, UserStats
from inkwell.services.auth_service import get_user_by_id
from inkwell.services.follow_service import (
    SelfFollowError,
    get_follow_counts,
    get_followers,
    get_following,
    toggle_follow,
    user_to_profile,
)
from inkwell.services.poem_service import get_user_liked_poem_ids, get_user_poems, get_user_stats, poem_to_response

router = APIRouter(prefix="/users", tags=["users"])


async def _user_or_404(db: AsyncSession, user_id: UUID) -> User:
    user = await get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/{user_id}", response_model=UserProfile)
async def get_user(
    user_id: UUID,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    user = await _user_or_404(db, user_id)
    return await user_to_profile(db, user, viewer_id=current_user.id if current_user else None)


@router.get("/{user_id}/poems", response_model=list[PoemResponse])
async def get_user_poems_endpoint(
    user_id: UUID,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    poems = await get_user_poems(db, user_id, skip=skip, limit=limit)
    liked_ids = await get_user_liked_poem_ids(db, current_user.id, [p.id for p in poems]) if current_user else set()
    return [poem_to_response(p, is_liked=p.id in liked_ids) for p in poems]


@router.get("/{user_id}/stats", response_model=UserStats)
async def get_user_stats_endpoint(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    return await get_user_stats(db, user_id)


@router.post("/{user_id}/follow", response_model=FollowToggleResponse)
async def toggle_follow_endpoint(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Follow the user, or unfollow if already following."""
    target = await _user_or_404(db, user_id)
    try:
        following = await toggle_follow(db, current_user, target)
    except SelfFollowError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    await db.commit()
    followers_count, _ = await get_follow_counts(db, target.id)
    return FollowToggleResponse(following=following, followers_count=followers_count)


@router.get("/{user_id}/followers", response_model=list[UserProfile])
async def get_user_followers(
    user_id: UUID,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    """Get users who follow this user."""
    await _user_or_404(db, user_id)
    viewer_id = current_user.id if current_user else None
    return [await user_to_profile(db, u, viewer_id) for u in await get_followers(db, user_id, skip, limit)]


@router.get("/{user_id}/following", response_model=list[UserProfile])
async def get_user_following(
    user_id: UUID,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    """Get users that this user follows."""
    await _user_or_404(db, user_id)
    viewer_id = current_user.id if current_user else None
    return [await user_to_profile(db, u, viewer_id) for u in await get_following(db, user_id, skip, limit)]
