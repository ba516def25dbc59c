"""
Schedule database model.

Weekly departure slots for a route.
"""

from sqlalchemy import Column, String, SmallInteger, Time, DateTime, ForeignKey
from backend.app.db.session import Base, generate_uuid, utcnow


class Schedule(Base):
    """
    Schedule model.

    day_of_week runs 1..7; end_time, when set, is after start_time.
    """
    __tablename__ = "schedules"

    id = Column(String(36), primary_key=True, default=generate_uuid)

    route_id = Column(String(36), ForeignKey('routes.id', ondelete='CASCADE'), nullable=False, index=True)

    day_of_week = Column(SmallInteger, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Schedule(route_id={self.route_id}, day={self.day_of_week}, start={self.start_time})>"
