"""
Ownership guard tests.
"""

import pytest
from types import SimpleNamespace

from backend.app.core.exceptions import ForbiddenError
from backend.app.core.guards import AccessDecision, authorize, ownership_guard


def test_owner_is_allowed():
    run = SimpleNamespace(profile_id="p1")
    assert authorize(run, "p1") is AccessDecision.ALLOWED


def test_other_profile_is_forbidden():
    run = SimpleNamespace(profile_id="p1")
    assert authorize(run, "p2") is AccessDecision.FORBIDDEN


def test_unowned_resource_is_forbidden():
    assert authorize(SimpleNamespace(profile_id=None), None) is AccessDecision.FORBIDDEN
    assert authorize(object(), "p1") is AccessDecision.FORBIDDEN


def test_enforce_raises_for_non_owner():
    with pytest.raises(ForbiddenError) as exc_info:
        ownership_guard.enforce(SimpleNamespace(profile_id="p1"), "p2", "route")

    assert exc_info.value.message == "Profile does not own this route"
    assert exc_info.value.status_code == 403


def test_enforce_passes_for_owner():
    ownership_guard.enforce(SimpleNamespace(profile_id="p1"), "p1", "route")
