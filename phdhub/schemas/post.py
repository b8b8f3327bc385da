"""Pydantic schemas for posts, comments and likes"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


# ==================== Post Schemas ====================

class PostCreate(BaseModel):
    """Request body for POST /api/posts"""
    model_config = ConfigDict(populate_by_name=True)

    community_id: str = Field(..., alias="communityId", min_length=1)
    title: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)
    media_url: Optional[str] = Field(None, alias="mediaUrl", max_length=1024)


class PostUpdate(BaseModel):
    """Request body for PUT /api/posts; omitted fields are left unchanged"""
    model_config = ConfigDict(populate_by_name=True)

    post_id: str = Field(..., alias="postId", min_length=1)
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    content: Optional[str] = Field(None, min_length=1)
    media_url: Optional[str] = Field(None, alias="mediaUrl", max_length=1024)


class PostResponse(BaseModel):
    """Post row enriched with its author's display fields"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    community_id: str
    author_id: str
    title: str
    content: str
    media_url: Optional[str] = None
    like_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None
    author_username: Optional[str] = None
    author_profile_image_url: Optional[str] = None


# ==================== Comment Schemas ====================

class CommentCreate(BaseModel):
    """Request body for POST /api/comments; the author is always the caller"""
    model_config = ConfigDict(populate_by_name=True)

    post_id: str = Field(..., alias="postId", min_length=1)
    content: str = Field(..., min_length=1)
    community_id: Optional[str] = Field(None, alias="communityId")


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    post_id: str
    author_id: str
    content: str
    created_at: datetime
    author_username: Optional[str] = None
    author_profile_image_url: Optional[str] = None


# ==================== Like Schemas ====================

class LikeToggleRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    post_id: str = Field(..., alias="postId", min_length=1)


class LikeToggleResponse(BaseModel):
    """Authoritative state after a toggle"""
    liked: bool
    like_count: int


class LikeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    post_id: str
    created_at: datetime
