"""Forum communities"""
from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.orm import relationship
from datetime import datetime

from phdhub.core.database import Base
from phdhub.core.types import GUID, generate_uuid, StringArray


class Community(Base):
    """Topic forum that owns posts"""
    __tablename__ = "communities"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False)
    hashtags = Column(StringArray, default=list, nullable=False)
    banner_photo_url = Column(String(1024), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    posts = relationship("Post", back_populates="community", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Community {self.name}>"
