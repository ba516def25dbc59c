"""
Street database model.

Streets are named line geometries loaded by bulk import and never edited
through the API.
"""

from sqlalchemy import Column, String, DateTime, JSON
from backend.app.db.session import Base, generate_uuid, utcnow


class Street(Base):
    """
    Street model.

    ``geometry`` holds a GeoJSON LineString or MultiLineString (lon, lat).
    """
    __tablename__ = "streets"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False, index=True)
    geometry = Column(JSON, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Street(id={self.id}, name='{self.name}')>"
