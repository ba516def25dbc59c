"""
Audit Log Database Model.

Tracks state-changing actions on profile-owned resources.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from backend.app.db.session import Base, utcnow


class AuditLog(Base):
    """
    Audit log model.

    Events logged:
    - RUN_STARTED / RUN_COMPLETED
    - ROUTE_CREATED
    - VEHICLE_CREATED / VEHICLE_UPDATED / VEHICLE_DELETED
    - STREETS_IMPORTED
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Who performed the action (None for system actions such as imports)
    actor_profile_id = Column(String(36), index=True, nullable=True)

    # What action was performed, and on what
    action = Column(String(100), nullable=False, index=True)
    entity_type = Column(String(50), nullable=True)
    entity_id = Column(String(36), index=True, nullable=True)

    # Additional context (JSON for flexibility)
    meta_data = Column(JSON, nullable=True)

    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', entity={self.entity_type}:{self.entity_id})>"
