"""
Posts API

List, read, create and edit posts inside a community. Every response
carries the author's display fields, resolved in one batched lookup. A write
that has committed still succeeds when that lookup fails; its author fields
are left empty.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from typing import Optional, List
from datetime import datetime

from phdhub.core.database import get_db
from phdhub.core.exceptions import InvalidRequestError, NotFoundError, NotFoundOrUnauthorizedError
from phdhub.core.logging_config import logger
from phdhub.models.community import Community
from phdhub.models.post import Post
from phdhub.modules.auth.dependencies import get_current_user_id, get_identity_directory
from phdhub.modules.identity import IdentityDirectory
from phdhub.schemas.post import PostCreate, PostUpdate, PostResponse
from phdhub.services.author_service import AuthorService
from phdhub.utils.pagination import PaginationParams, apply_pagination


router = APIRouter()


# ==================== Helper Functions ====================

async def get_post_or_404(post_id: str, db: AsyncSession) -> Post:
    """Get post by ID or raise 404"""
    result = await db.execute(
        select(Post).where(Post.id == post_id).execution_options(populate_existing=True)
    )
    post = result.scalar_one_or_none()
    if not post:
        raise NotFoundError("Post", post_id)
    return post


# ==================== Endpoints ====================

@router.get("", response_model=List[PostResponse])
async def list_posts(
    community_id: Optional[str] = Query(None, alias="communityId"),
    page: Optional[int] = Query(None, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
    directory: IdentityDirectory = Depends(get_identity_directory),
):
    """List a community's posts, newest first. Paged only when page/page_size is given."""
    if not community_id:
        raise InvalidRequestError("communityId is required", field="communityId")

    query = (
        select(Post)
        .where(Post.community_id == community_id)
        .order_by(Post.created_at.desc())
        .execution_options(populate_existing=True)
    )
    query = apply_pagination(query, PaginationParams(page=page, page_size=page_size))

    result = await db.execute(query)
    posts = result.scalars().all()

    return await AuthorService(directory).enrich_posts(posts)


@router.post("", response_model=PostResponse, status_code=201)
async def create_post(
    data: PostCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    directory: IdentityDirectory = Depends(get_identity_directory),
):
    community = await db.get(Community, data.community_id)
    if not community:
        raise NotFoundError("Community", data.community_id)

    post = Post(
        community_id=data.community_id,
        author_id=user_id,
        title=data.title,
        content=data.content,
        media_url=data.media_url,
        like_count=0,
    )
    db.add(post)
    await db.commit()
    await db.refresh(post)

    logger.info(f"[Posts] {user_id} created post {post.id} in community {community.id}")
    return await AuthorService(directory).enrich_written_post(post)


@router.put("", response_model=PostResponse)
async def update_post(
    data: PostUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    directory: IdentityDirectory = Depends(get_identity_directory),
):
    """
    Edit a post. Only the author may edit; a missing post and a foreign post
    produce the same response.
    """
    changes = {
        field: value
        for field, value in data.model_dump(exclude_unset=True, exclude={"post_id"}).items()
        if value is not None or field == "media_url"
    }
    changes["updated_at"] = datetime.utcnow()

    result = await db.execute(
        update(Post)
        .where(Post.id == data.post_id, Post.author_id == user_id)
        .values(**changes)
        .execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        await db.rollback()
        logger.warning(f"[Posts] Rejected edit of post {data.post_id} by {user_id}")
        raise NotFoundOrUnauthorizedError("Post")

    post = await get_post_or_404(data.post_id, db)
    await db.commit()

    logger.info(f"[Posts] {user_id} updated post {post.id}")
    return await AuthorService(directory).enrich_written_post(post)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: str,
    db: AsyncSession = Depends(get_db),
    directory: IdentityDirectory = Depends(get_identity_directory),
):
    post = await get_post_or_404(post_id, db)
    return await AuthorService(directory).enrich_post(post)
