# Re-export all models for convenient imports
from phdhub.models.user import User
from phdhub.models.community import Community
from phdhub.models.post import Post, Comment, Like
from phdhub.models.event import Event
from phdhub.models.research import (
    ResearchGroup,
    ResearchGroupActivity,
    ResearchGroupDiscussion,
    DiscussionComment,
    ResearchGroupResource,
    GroupStatus,
    ActivityType,
)

__all__ = [
    "User",
    # Forum
    "Community",
    "Post",
    "Comment",
    "Like",
    # Calendar
    "Event",
    # Research groups
    "ResearchGroup",
    "ResearchGroupActivity",
    "ResearchGroupDiscussion",
    "DiscussionComment",
    "ResearchGroupResource",
    "GroupStatus",
    "ActivityType",
]
