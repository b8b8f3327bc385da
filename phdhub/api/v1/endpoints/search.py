"""Keyword search across users, communities and posts"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from typing import Optional

from phdhub.core.database import get_db
from phdhub.core.exceptions import InvalidRequestError
from phdhub.models.community import Community
from phdhub.models.post import Post
from phdhub.models.user import User
from phdhub.modules.auth.dependencies import get_identity_directory
from phdhub.modules.identity import IdentityDirectory
from phdhub.schemas.community import CommunityResponse
from phdhub.schemas.user import SearchResponse, UserSearchResult
from phdhub.services.author_service import post_response


router = APIRouter()


@router.get("", response_model=SearchResponse)
async def search(
    keywords: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    directory: IdentityDirectory = Depends(get_identity_directory),
):
    """Case-insensitive substring match on usernames, community names and post text"""
    if not keywords or not keywords.strip():
        raise InvalidRequestError("Keywords are required", field="keywords")

    pattern = f"%{keywords.strip()}%"

    users = (await db.execute(
        select(User).where(User.username.ilike(pattern)).order_by(User.username)
    )).scalars().all()
    communities = (await db.execute(
        select(Community).where(Community.name.ilike(pattern)).order_by(Community.created_at.desc())
    )).scalars().all()
    posts = (await db.execute(
        select(Post)
        .where(or_(Post.title.ilike(pattern), Post.content.ilike(pattern)))
        .order_by(Post.created_at.desc())
    )).scalars().all()

    # One lookup covers matched users and post authors
    profiles = await directory.get_profiles([u.id for u in users] + [p.author_id for p in posts])

    user_results = []
    for user in users:
        result = UserSearchResult.model_validate(user)
        result.profile_image_url = profiles[user.id].image_url
        user_results.append(result)

    return SearchResponse(
        users=user_results,
        communities=[CommunityResponse.model_validate(c) for c in communities],
        posts=[post_response(p, profiles.get(p.author_id)) for p in posts],
    )
