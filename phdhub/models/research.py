"""Research groups: membership, activity feed, discussions and file resources"""
from sqlalchemy import Column, String, DateTime, Text, Integer, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from phdhub.core.database import Base
from phdhub.core.types import GUID, generate_uuid, StringArray


class GroupStatus(str, enum.Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class ActivityType(str, enum.Enum):
    """Entries in a group's activity feed"""
    JOIN_GROUP = "join_group"
    LEAVE_GROUP = "leave_group"
    CREATE_RESOURCE = "create_resource"
    CREATE_DISCUSSION = "create_discussion"
    ADD_DISCUSSION_COMMENT = "add_discussion_comment"


class ResearchGroup(Base):
    """Research group; admins is always a subset of members"""
    __tablename__ = "research_groups"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=False)
    image_url = Column(String(1024), nullable=False)
    admins = Column(StringArray, default=list, nullable=False)
    members = Column(StringArray, default=list, nullable=False)
    group_status = Column(String(20), default=GroupStatus.PUBLIC.value, nullable=False)
    # Bumped by every membership change; writers update only the version they read
    membership_version = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_active = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    activities = relationship("ResearchGroupActivity", back_populates="group", cascade="all, delete-orphan")
    discussions = relationship("ResearchGroupDiscussion", back_populates="group", cascade="all, delete-orphan")
    resources = relationship("ResearchGroupResource", back_populates="group", cascade="all, delete-orphan")

    def is_member(self, user_id: str) -> bool:
        return user_id in (self.members or [])

    def is_admin(self, user_id: str) -> bool:
        return user_id in (self.admins or [])

    def touch(self):
        self.last_active = datetime.utcnow()


class ResearchGroupActivity(Base):
    __tablename__ = "research_group_activities"

    __table_args__ = (
        Index("ix_activities_group_created", "group_id", "created_at"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    group_id = Column(GUID, ForeignKey("research_groups.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(255), nullable=False)
    activity_type = Column(String(50), nullable=False)
    details = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    group = relationship("ResearchGroup", back_populates="activities")


class ResearchGroupDiscussion(Base):
    __tablename__ = "research_group_discussions"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    group_id = Column(GUID, ForeignKey("research_groups.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(255), nullable=False)
    title = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    group = relationship("ResearchGroup", back_populates="discussions")
    comments = relationship("DiscussionComment", back_populates="discussion", cascade="all, delete-orphan")


class DiscussionComment(Base):
    __tablename__ = "discussion_comments"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    discussion_id = Column(
        GUID, ForeignKey("research_group_discussions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    discussion = relationship("ResearchGroupDiscussion", back_populates="comments")


class ResearchGroupResource(Base):
    """Metadata for a file uploaded to object storage via a presigned URL"""
    __tablename__ = "research_group_resources"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    group_id = Column(GUID, ForeignKey("research_groups.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(255), nullable=False)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    file_key = Column(String(1024), nullable=False)
    file_name = Column(String(500), nullable=False)
    file_type = Column(String(255), nullable=True)
    file_size = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    group = relationship("ResearchGroup", back_populates="resources")
