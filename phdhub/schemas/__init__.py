from phdhub.schemas.community import (
    CommunityCreate,
    CommunityResponse,
    BannerUploadRequest,
    BannerUploadResponse,
)
from phdhub.schemas.post import (
    PostCreate,
    PostUpdate,
    PostResponse,
    CommentCreate,
    CommentResponse,
    LikeToggleRequest,
    LikeToggleResponse,
    LikeResponse,
)
from phdhub.schemas.event import EventCreate, EventResponse
from phdhub.schemas.user import ProfileUpdate, UserProfileResponse, UserSearchResult, SearchResponse

__all__ = [
    "CommunityCreate",
    "CommunityResponse",
    "BannerUploadRequest",
    "BannerUploadResponse",
    "PostCreate",
    "PostUpdate",
    "PostResponse",
    "CommentCreate",
    "CommentResponse",
    "LikeToggleRequest",
    "LikeToggleResponse",
    "LikeResponse",
    "EventCreate",
    "EventResponse",
    "ProfileUpdate",
    "UserProfileResponse",
    "UserSearchResult",
    "SearchResponse",
]
