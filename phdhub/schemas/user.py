"""Pydantic schemas for user profiles and search results"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Dict, Any
from datetime import datetime

from phdhub.schemas.community import CommunityResponse
from phdhub.schemas.post import PostResponse


class ProfileUpdate(BaseModel):
    """Locally owned profile fields; identity fields are not accepted here"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    contact_info: Optional[Dict[str, Any]] = Field(None, alias="contactInfo")
    bio: Optional[str] = None
    experiences: Optional[List[Dict[str, Any]]] = None
    portfolio: Optional[List[Dict[str, Any]]] = None
    education: Optional[List[Dict[str, Any]]] = None


class UserProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    contact_info: Optional[Dict[str, Any]] = None
    bio: Optional[str] = None
    experiences: Optional[List[Dict[str, Any]]] = None
    portfolio: Optional[List[Dict[str, Any]]] = None
    education: Optional[List[Dict[str, Any]]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserSearchResult(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None


class SearchResponse(BaseModel):
    users: List[UserSearchResult] = []
    communities: List[CommunityResponse] = []
    posts: List[PostResponse] = []
