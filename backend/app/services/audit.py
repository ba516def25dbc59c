"""
Audit logging service for tracking state-changing actions.

Audit rows are added to the caller's session and committed together with the
change they describe.
"""

from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from backend.app.models.audit_log import AuditLog


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    RUN_STARTED = "RUN_STARTED"
    RUN_COMPLETED = "RUN_COMPLETED"

    ROUTE_CREATED = "ROUTE_CREATED"

    VEHICLE_CREATED = "VEHICLE_CREATED"
    VEHICLE_UPDATED = "VEHICLE_UPDATED"
    VEHICLE_DELETED = "VEHICLE_DELETED"

    STREETS_IMPORTED = "STREETS_IMPORTED"


def record_event(
    db: AsyncSession,
    action: str,
    actor_profile_id: Optional[str] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Add an audit row to the current transaction.

    Args:
        db: Database session
        action: Action being performed (use AuditAction constants)
        actor_profile_id: Profile performing the action
        entity_type: Kind of entity affected ("run", "route", ...)
        entity_id: ID of the affected entity
        metadata: Additional context as JSON

    Returns:
        Pending AuditLog instance (persisted on the caller's commit)
    """
    audit_log = AuditLog(
        actor_profile_id=actor_profile_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        meta_data=metadata
    )

    db.add(audit_log)
    return audit_log


async def get_audit_trail(
    db: AsyncSession,
    entity_id: Optional[str] = None,
    action: Optional[str] = None,
    limit: int = 100
) -> list[AuditLog]:
    """
    Retrieve audit trail with optional filtering.

    Returns:
        List of AuditLog instances, most recent first
    """
    query = select(AuditLog).order_by(desc(AuditLog.timestamp), desc(AuditLog.id))

    if entity_id:
        query = query.where(AuditLog.entity_id == entity_id)

    if action:
        query = query.where(AuditLog.action == action)

    query = query.limit(limit)

    result = await db.execute(query)
    return list(result.scalars().all())
