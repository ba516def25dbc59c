"""
Position database model.

Stores the GPS breadcrumb trail of a run.
"""

from sqlalchemy import Column, String, DateTime, ForeignKey, JSON
from backend.app.db.session import Base, generate_uuid


class Position(Base):
    """
    Position model.

    Immutable GPS sample; ``geometry`` is a GeoJSON Point [longitude, latitude].
    """
    __tablename__ = "positions"

    id = Column(String(36), primary_key=True, default=generate_uuid)

    # References
    run_id = Column(String(36), ForeignKey('runs.id', ondelete='CASCADE'), nullable=False, index=True)
    profile_id = Column(String(36), ForeignKey('profiles.id'), nullable=False, index=True)

    captured_at = Column(DateTime(timezone=True), nullable=False, index=True)
    geometry = Column(JSON, nullable=False)

    def __repr__(self):
        return f"<Position(run_id={self.run_id}, geometry={self.geometry})>"
