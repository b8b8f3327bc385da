"""Posts and their engagement rows (comments, likes)"""
from sqlalchemy import (
    Column, String, DateTime, Text, Integer, ForeignKey, Index, UniqueConstraint
)
from sqlalchemy.orm import relationship
from datetime import datetime

from phdhub.core.database import Base
from phdhub.core.types import GUID, generate_uuid


class Post(Base):
    """
    Forum post.

    like_count always equals the number of Like rows for the post; it is
    only ever changed by atomic increments in the same transaction as the
    Like insert or delete.
    """
    __tablename__ = "posts"

    __table_args__ = (
        Index("ix_posts_community_created", "community_id", "created_at"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    community_id = Column(GUID, ForeignKey("communities.id", ondelete="CASCADE"), nullable=False)
    author_id = Column(String(255), nullable=False, index=True)

    title = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)
    media_url = Column(String(1024), nullable=True)
    like_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    community = relationship("Community", back_populates="posts")
    comments = relationship("Comment", back_populates="post", cascade="all, delete-orphan")
    likes = relationship("Like", back_populates="post", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Post {self.id} likes={self.like_count}>"


class Comment(Base):
    """Reply to a post"""
    __tablename__ = "comments"

    __table_args__ = (
        Index("ix_comments_post_created", "post_id", "created_at"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    post_id = Column(GUID, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False)
    author_id = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    post = relationship("Post", back_populates="comments")


class Like(Base):
    """One user's like on one post; at most one per (user, post)"""
    __tablename__ = "likes"

    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_likes_user_post"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(String(255), nullable=False, index=True)
    post_id = Column(GUID, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    post = relationship("Post", back_populates="likes")
