"""Poems CRUD, listing, likes and comments."""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.api.deps import get_db, get_current_user, get_current_user_optional
from inkwell.core.config import settings
from inkwell.models.poem import Poem
from inkwell.models.user import User
from inkwell.schemas.comment import CommentCreate, CommentResponse
from inkwell.schemas.poem import (
    LikeStatusResponse,
    LikeToggleResponse,
    MessageResponse,
    PoemCreate,
    PoemResponse,
    PoemSort,
    PoemUpdate,
)
from inkwell.services.comment_service import (
    ReplyDepthError,
    comment_to_response,
    create_comment,
    list_poem_comments,
    thread_to_response,
)
from inkwell.services.poem_service import (
    create_poem,
    delete_poem,
    get_featured_poems,
    get_poem,
    get_trending_poems,
    get_user_liked_poem_ids,
    is_poem_liked,
    list_poems,
    poem_to_response,
    toggle_like,
    update_poem,
)
from inkwell.services.storage_service import get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/poems", tags=["poems"])

POEM_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}

EXT_MAP = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


def _validate_image(file: UploadFile) -> str:
    content_type = file.content_type or ""
    if content_type not in POEM_IMAGE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only image files are allowed",
        )
    return EXT_MAP[content_type]


async def _read_and_validate_size(file: UploadFile, max_size_mb: int) -> bytes:
    data = await file.read()
    if len(data) > max_size_mb * 1024 * 1024:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File too large. Max {max_size_mb}MB",
        )
    return data


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    field = ".".join(str(p) for p in err.get("loc", ()))
    return f"{field}: {err['msg']}" if field else err["msg"]


async def _poem_or_404(db: AsyncSession, poem_id: UUID) -> Poem:
    poem = await get_poem(db, poem_id)
    if not poem:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Poem not found")
    return poem


async def _owned_poem(db: AsyncSession, poem_id: UUID, user: User) -> Poem:
    poem = await _poem_or_404(db, poem_id)
    if poem.author_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")
    return poem


async def _to_responses(db: AsyncSession, poems: list[Poem], viewer: User | None) -> list[PoemResponse]:
    liked_ids = await get_user_liked_poem_ids(db, viewer.id, [p.id for p in poems]) if viewer else set()
    return [poem_to_response(p, is_liked=p.id in liked_ids) for p in poems]


@router.get("", response_model=list[PoemResponse])
async def list_poems_endpoint(
    category: str | None = Query(None),
    search: str | None = Query(None),
    sort: PoemSort = Query("recent"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    poems = await list_poems(
        db,
        category=category,
        search=search,
        sort=sort,
        skip=(page - 1) * limit,
        limit=limit,
    )
    return await _to_responses(db, poems, current_user)


@router.get("/featured", response_model=list[PoemResponse])
async def featured_poems(
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    return await _to_responses(db, await get_featured_poems(db), current_user)


@router.get("/trending", response_model=list[PoemResponse])
async def trending_poems(
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    return await _to_responses(db, await get_trending_poems(db), current_user)


@router.get("/{poem_id}", response_model=PoemResponse)
async def get_poem_endpoint(
    poem_id: UUID,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    poem = await _poem_or_404(db, poem_id)
    is_liked = await is_poem_liked(db, current_user.id, poem.id) if current_user else False
    return poem_to_response(poem, is_liked=is_liked)


@router.post("", response_model=PoemResponse, status_code=status.HTTP_201_CREATED)
async def create_poem_endpoint(
    title: str = Form(...),
    content: str = Form(...),
    category: str = Form(...),
    tags: str = Form(""),
    image: UploadFile | None = File(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        data = PoemCreate(title=title, content=content, category=category, tags=tags)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_first_error(e))
    image_url = ""
    if image is not None and image.filename:
        ext = _validate_image(image)
        payload = await _read_and_validate_size(image, max_size_mb=settings.MAX_IMAGE_SIZE_MB)
        image_url = get_storage().save(str(current_user.id), "poems", payload, ext)
    try:
        poem = await create_poem(db, current_user.id, data, image_url=image_url)
        await db.commit()
    except Exception:
        if image_url:
            get_storage().delete(image_url)
        raise
    poem = await get_poem(db, poem.id)
    return poem_to_response(poem, is_liked=False)


@router.put("/{poem_id}", response_model=PoemResponse)
async def update_poem_endpoint(
    poem_id: UUID,
    data: PoemUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    poem = await _owned_poem(db, poem_id, current_user)
    await update_poem(db, poem, data)
    await db.commit()
    poem = await get_poem(db, poem_id)
    is_liked = await is_poem_liked(db, current_user.id, poem.id)
    return poem_to_response(poem, is_liked=is_liked)


@router.delete("/{poem_id}", response_model=MessageResponse)
async def delete_poem_endpoint(
    poem_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    poem = await _owned_poem(db, poem_id, current_user)
    image_url = poem.image_url
    await delete_poem(db, poem)
    await db.commit()
    if image_url:
        get_storage().delete(image_url)
    return MessageResponse(message="Poem deleted successfully")


@router.post("/{poem_id}/like", response_model=LikeToggleResponse)
async def toggle_like_endpoint(
    poem_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    poem = await _poem_or_404(db, poem_id)
    liked = await toggle_like(db, poem, current_user.id)
    await db.commit()
    return LikeToggleResponse(liked=liked, likes_count=poem.likes_count)


@router.get("/{poem_id}/like-status", response_model=LikeStatusResponse)
async def like_status(
    poem_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    poem = await _poem_or_404(db, poem_id)
    return LikeStatusResponse(liked=await is_poem_liked(db, current_user.id, poem.id))


@router.get("/{poem_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    poem_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    await _poem_or_404(db, poem_id)
    comments = await list_poem_comments(db, poem_id)
    return [thread_to_response(c) for c in comments]


@router.post("/{poem_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment_endpoint(
    poem_id: UUID,
    data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    poem = await _poem_or_404(db, poem_id)
    try:
        comment = await create_comment(db, poem, current_user.id, data)
    except ReplyDepthError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if comment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    await db.commit()
    return comment_to_response(comment, author=current_user)
