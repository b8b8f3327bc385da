"""Pydantic schemas for research groups"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum


class GroupStatusEnum(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class MemberInfo(BaseModel):
    """Display fields for one group member"""
    id: str
    name: str
    image_url: Optional[str] = None


# ==================== Group Schemas ====================

class ResearchGroupCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(..., min_length=1)
    image_url: str = Field(..., alias="imageUrl", min_length=1, max_length=1024)
    group_status: GroupStatusEnum = Field(..., alias="groupStatus")


class ResearchGroupResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    image_url: str
    admins: List[str] = []
    members: List[str] = []
    group_status: str
    created_at: datetime
    last_active: datetime


class ResearchGroupListItem(ResearchGroupResponse):
    member_count: int = 0
    member_images: List[str] = []


class ResearchGroupDetail(ResearchGroupResponse):
    admin_info: List[MemberInfo] = []
    member_info: List[MemberInfo] = []


class MembershipResponse(BaseModel):
    group_id: str
    is_member: bool
    member_count: int


# ==================== Activity Schemas ====================

class ActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    group_id: str
    user_id: str
    activity_type: str
    details: Optional[Dict[str, Any]] = None
    created_at: datetime
    user_name: Optional[str] = None
    user_image_url: Optional[str] = None


# ==================== Discussion Schemas ====================

class DiscussionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)


class DiscussionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    group_id: str
    user_id: str
    title: str
    content: str
    created_at: datetime
    author_name: Optional[str] = None
    author_image_url: Optional[str] = None
    comment_count: int = 0


class DiscussionCommentCreate(BaseModel):
    content: str


class DiscussionCommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    discussion_id: str
    user_id: str
    content: str
    created_at: datetime
    author_name: Optional[str] = None
    author_image_url: Optional[str] = None


# ==================== Resource Schemas ====================

class ResourceCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    file_key: str = Field(..., alias="fileKey", min_length=1)
    file_name: str = Field(..., alias="fileName", min_length=1)
    file_type: Optional[str] = Field(None, alias="fileType")
    file_size: Optional[int] = Field(None, alias="fileSize", ge=0)


class ResourceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    group_id: str
    user_id: str
    title: str
    description: Optional[str] = None
    file_key: str
    file_name: str
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    created_at: datetime
    uploader_name: Optional[str] = None


class PresignedUploadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(..., alias="fileName", min_length=1)
    file_type: str = Field(..., alias="fileType", min_length=1)


class PresignedUploadResponse(BaseModel):
    url: str
    key: str


class DownloadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_key: str = Field(..., alias="fileKey", min_length=1)


class DownloadResponse(BaseModel):
    url: str
