"""Calendar events"""
from sqlalchemy import Column, String, DateTime, Text
from datetime import datetime

from phdhub.core.database import Base
from phdhub.core.types import GUID, generate_uuid


class Event(Base):
    __tablename__ = "events"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    link = Column(String(1024), nullable=False)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    user_id = Column(String(255), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
