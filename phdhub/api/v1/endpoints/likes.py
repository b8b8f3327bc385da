"""Likes API"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from phdhub.core.database import get_db
from phdhub.modules.auth.dependencies import get_current_user_id
from phdhub.schemas.post import LikeToggleRequest, LikeToggleResponse, LikeResponse
from phdhub.services.like_service import LikeService


router = APIRouter()


@router.get("", response_model=List[LikeResponse])
async def list_my_likes(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Posts the caller has liked, used to seed client like state"""
    return await LikeService(db).list_for_user(user_id)


@router.post("", response_model=LikeToggleResponse)
async def toggle_like(
    data: LikeToggleRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Flip the caller's like on a post and return the authoritative state"""
    result = await LikeService(db).toggle(user_id, data.post_id)
    return LikeToggleResponse(liked=result.liked, like_count=result.like_count)
