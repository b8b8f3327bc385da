"""Comments API - oldest-first comment threads under a post"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional, List

from phdhub.core.database import get_db
from phdhub.core.exceptions import InvalidRequestError, NotFoundError
from phdhub.core.logging_config import logger
from phdhub.models.post import Post, Comment
from phdhub.modules.auth.dependencies import get_current_user_id, get_identity_directory
from phdhub.modules.identity import IdentityDirectory
from phdhub.schemas.post import CommentCreate, CommentResponse
from phdhub.services.author_service import AuthorService


router = APIRouter()


@router.get("", response_model=List[CommentResponse])
async def list_comments(
    post_id: Optional[str] = Query(None, alias="postId"),
    db: AsyncSession = Depends(get_db),
    directory: IdentityDirectory = Depends(get_identity_directory),
):
    if not post_id:
        raise InvalidRequestError("postId is required", field="postId")

    result = await db.execute(
        select(Comment)
        .where(Comment.post_id == post_id)
        .order_by(Comment.created_at.asc())
    )
    comments = result.scalars().all()

    return await AuthorService(directory).enrich_comments(comments)


@router.post("", response_model=CommentResponse, status_code=201)
async def create_comment(
    data: CommentCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    directory: IdentityDirectory = Depends(get_identity_directory),
):
    post = await db.get(Post, data.post_id)
    if not post:
        raise NotFoundError("Post", data.post_id)

    comment = Comment(post_id=data.post_id, author_id=user_id, content=data.content)
    db.add(comment)
    await db.commit()
    await db.refresh(comment)

    logger.info(f"[Comments] {user_id} commented on post {data.post_id}")
    return await AuthorService(directory).enrich_written_comment(comment)
