"""Communities API"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List

from phdhub.core.database import get_db
from phdhub.core.exceptions import NotFoundError
from phdhub.core.logging_config import logger
from phdhub.models.community import Community
from phdhub.modules.auth.dependencies import get_current_user_id, get_storage_client
from phdhub.schemas.community import (
    CommunityCreate, CommunityResponse, BannerUploadRequest, BannerUploadResponse
)
from phdhub.utils.storage_client import StorageClient


router = APIRouter()


@router.get("", response_model=List[CommunityResponse])
async def list_communities(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Community).order_by(Community.created_at.desc()))
    return result.scalars().all()


@router.post("", response_model=CommunityResponse, status_code=201)
async def create_community(
    data: CommunityCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    community = Community(
        name=data.name,
        description=data.description,
        hashtags=[tag.strip() for tag in data.hashtags if tag.strip()],
        banner_photo_url=data.banner_photo_url,
    )
    db.add(community)
    await db.commit()
    await db.refresh(community)

    logger.info(f"[Communities] {user_id} created community {community.id} ({community.name})")
    return community


@router.post("/banner-upload-url", response_model=BannerUploadResponse)
async def create_banner_upload_url(
    data: BannerUploadRequest,
    user_id: str = Depends(get_current_user_id),
    storage: StorageClient = Depends(get_storage_client),
):
    """Presigned PUT for a community banner image, plus where it will be readable"""
    key = storage.banner_key(data.file_name)
    url = storage.generate_upload_url(key, data.file_type)
    return BannerUploadResponse(url=url, key=key, public_url=storage.public_url(key))


@router.get("/{community_id}", response_model=CommunityResponse)
async def get_community(community_id: str, db: AsyncSession = Depends(get_db)):
    community = await db.get(Community, community_id)
    if not community:
        raise NotFoundError("Community", community_id)
    return community
