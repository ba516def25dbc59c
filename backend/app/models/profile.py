"""
Profile database model.

A profile is the tenancy root: vehicles, routes and runs belong to one.
"""

from sqlalchemy import Column, String, DateTime
from backend.app.db.session import Base, generate_uuid, utcnow


class Profile(Base):
    """
    Profile model.

    Created by an admin action and immutable afterwards.
    """
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Profile(id={self.id}, name='{self.name}')>"
