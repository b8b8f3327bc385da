"""Pydantic schemas for communities"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime


class CommunityCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    hashtags: List[str] = Field(default_factory=list)
    banner_photo_url: Optional[str] = Field(None, alias="bannerPhotoUrl", max_length=1024)


class CommunityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    hashtags: List[str] = []
    banner_photo_url: Optional[str] = None
    created_at: datetime


class BannerUploadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(..., alias="fileName", min_length=1)
    file_type: str = Field(..., alias="fileType", min_length=1)


class BannerUploadResponse(BaseModel):
    url: str
    key: str
    public_url: str
