"""
Ownership guards for profile-scoped resources.

Vehicles, routes, runs and positions all carry a ``profile_id``. Access is
decided by comparing it with the requesting profile.
"""

import enum
from typing import Any

from backend.app.core.exceptions import ForbiddenError


class AccessDecision(str, enum.Enum):
    """Result of an authorization check."""
    ALLOWED = "ALLOWED"
    FORBIDDEN = "FORBIDDEN"


def authorize(resource: Any, requester_profile_id: str) -> AccessDecision:
    """
    Decide whether a profile may act on a resource.

    Args:
        resource: Any owned model instance (exposes ``profile_id``)
        requester_profile_id: Profile making the request

    Returns:
        AccessDecision.ALLOWED when the profile owns the resource
    """
    owner_id = getattr(resource, "profile_id", None)
    if owner_id is not None and owner_id == requester_profile_id:
        return AccessDecision.ALLOWED
    return AccessDecision.FORBIDDEN


class OwnershipGuard:
    """
    Class-based ownership guard for validating multi-tenant access.

    Usage:
        ownership_guard = OwnershipGuard()

        run = await get_run(db, run_id)
        ownership_guard.enforce(run, profile_id, "run")
    """

    def enforce(self, resource: Any, requester_profile_id: str, resource_name: str = "resource"):
        """
        Raise ForbiddenError unless the profile owns the resource.

        Args:
            resource: Owned model instance
            requester_profile_id: Profile making the request
            resource_name: Name of resource for error message
        """
        if authorize(resource, requester_profile_id) is AccessDecision.FORBIDDEN:
            raise ForbiddenError(
                message=f"Profile does not own this {resource_name}",
                details={"resource": resource_name, "profile_id": requester_profile_id}
            )


ownership_guard = OwnershipGuard()
