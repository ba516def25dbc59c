"""
Lookup helpers shared by the services.

Ids that arrive in a request payload are references: a missing row is a
validation failure (422). Ids that address the resource itself (path
parameters) produce NotFound (404).
"""

from typing import Any, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import InvalidInputError, ResourceNotFoundError


async def get_by_id(db: AsyncSession, model: Any, entity_id: Any) -> Optional[Any]:
    result = await db.execute(select(model).where(model.id == entity_id))
    return result.scalar_one_or_none()


async def require_reference(db: AsyncSession, model: Any, entity_id: Any, field: str) -> Any:
    """Load a row referenced from a payload field, or raise InvalidInputError."""
    entity = await get_by_id(db, model, entity_id)
    if entity is None:
        raise InvalidInputError(
            message=f"The selected {field} is invalid",
            details={"field": field, "value": entity_id}
        )
    return entity


async def require_resource(db: AsyncSession, model: Any, entity_id: Any, resource: str) -> Any:
    """Load the addressed row, or raise ResourceNotFoundError."""
    entity = await get_by_id(db, model, entity_id)
    if entity is None:
        raise ResourceNotFoundError(resource, entity_id)
    return entity
