"""
Run-related enumerations.
"""

import enum


class RunStatus(str, enum.Enum):
    """Run status enumeration."""
    IN_PROGRESS = "IN_PROGRESS"  # Created in this state by start_run
    COMPLETED = "COMPLETED"  # Terminal, set by finalize_run


# Forward-only lifecycle
RUN_TRANSITIONS = {
    RunStatus.IN_PROGRESS: {RunStatus.COMPLETED},
    RunStatus.COMPLETED: set(),
}


def can_transition(current: RunStatus, target: RunStatus) -> bool:
    return target in RUN_TRANSITIONS[current]
