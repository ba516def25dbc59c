"""
Run database model.

A run (recorrido) is one execution of a route by a vehicle.
"""

from sqlalchemy import Column, String, DateTime, Enum, ForeignKey, Index, text
from backend.app.db.session import Base, generate_uuid, utcnow
from backend.app.models.run_enums import RunStatus


class Run(Base):
    """
    Run model.

    At most one IN_PROGRESS run per vehicle, enforced by a partial unique index
    so that concurrent starts cannot both succeed.
    """
    __tablename__ = "runs"

    id = Column(String(36), primary_key=True, default=generate_uuid)

    # References
    route_id = Column(String(36), ForeignKey('routes.id'), nullable=False, index=True)
    vehicle_id = Column(String(36), ForeignKey('vehicles.id'), nullable=False, index=True)

    # Ownership - Run belongs to Profile
    profile_id = Column(String(36), ForeignKey('profiles.id'), nullable=False, index=True)

    # Lifecycle
    status = Column(Enum(RunStatus), default=RunStatus.IN_PROGRESS, nullable=False, index=True)
    started_at = Column(DateTime(timezone=True), nullable=False)
    ended_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index(
            'ix_runs_vehicle_active', 'vehicle_id', unique=True,
            postgresql_where=text("status = 'IN_PROGRESS'"),
            sqlite_where=text("status = 'IN_PROGRESS'"),
        ),
    )

    def __repr__(self):
        return f"<Run(id={self.id}, vehicle_id={self.vehicle_id}, status='{self.status.value}')>"
