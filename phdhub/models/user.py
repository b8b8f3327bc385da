"""Local mirror of identity-provider users plus locally owned profile fields"""
from sqlalchemy import Column, String, DateTime, Text, JSON
from datetime import datetime

from phdhub.core.database import Base


class User(Base):
    """
    User mirror.

    The identity fields (email, names, username, external_accounts) change
    only through the identity webhook. The profile fields change only
    through the profile update operation.
    """
    __tablename__ = "users"

    id = Column(String(255), primary_key=True)

    # Mirrored from the identity provider
    email = Column(String(255), nullable=True, index=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    username = Column(String(255), nullable=True, index=True)
    external_accounts = Column(JSON, nullable=True)

    # Locally owned profile
    contact_info = Column(JSON, nullable=True)
    bio = Column(Text, nullable=True)
    experiences = Column(JSON, nullable=True)
    portfolio = Column(JSON, nullable=True)
    education = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    MIRRORED_FIELDS = ("email", "first_name", "last_name", "username", "external_accounts")
    PROFILE_FIELDS = ("contact_info", "bio", "experiences", "portfolio", "education")

    def __repr__(self):
        return f"<User {self.id}>"
