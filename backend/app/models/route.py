"""
Route database models.

A route is either drawn by hand (shape) or assembled from an ordered list of
streets. The street order lives on the association row, not in insertion order.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from backend.app.db.session import Base, generate_uuid, utcnow


class Route(Base):
    """
    Route model.

    ``geometry`` holds a GeoJSON LineString or MultiLineString.
    """
    __tablename__ = "routes"

    id = Column(String(36), primary_key=True, default=generate_uuid)

    # Ownership - Route belongs to Profile
    profile_id = Column(String(36), ForeignKey('profiles.id'), nullable=False, index=True)

    # Route details
    name = Column(String(255), nullable=False)
    color_hex = Column(String(7), nullable=True)
    geometry = Column(JSON, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Route(id={self.id}, name='{self.name}', profile_id={self.profile_id})>"


class RouteStreet(Base):
    """
    Route-Street association.

    One row per entry of the caller's street list; duplicates are allowed.
    """
    __tablename__ = "route_streets"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    route_id = Column(String(36), ForeignKey('routes.id', ondelete='CASCADE'), nullable=False, index=True)
    street_id = Column(String(36), ForeignKey('streets.id'), nullable=False, index=True)
    order_index = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<RouteStreet(route_id={self.route_id}, street_id={self.street_id}, order={self.order_index})>"
