"""
Vehicle database model.

Vehicles are owned by a profile; plates are unique across all profiles.
"""

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from backend.app.db.session import Base, generate_uuid, utcnow


class Vehicle(Base):
    """
    Vehicle model.

    A physical asset that executes runs.
    """
    __tablename__ = "vehicles"

    id = Column(String(36), primary_key=True, default=generate_uuid)

    # Ownership - Vehicle belongs to Profile
    profile_id = Column(String(36), ForeignKey('profiles.id'), nullable=False, index=True)

    # Identification
    plate = Column(String(10), unique=True, nullable=False, index=True)
    make = Column(String(255), nullable=True)
    model = Column(String(255), nullable=True)

    # Status
    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Vehicle(id={self.id}, plate='{self.plate}', profile_id={self.profile_id})>"
