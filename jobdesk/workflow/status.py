"""
Task status values and the transition table.

Lifecycle of a stage task:

    in-queue -> pending -> in-progress -> completed
    pending | in-progress -> delayed

``in-queue -> pending`` is performed only by the cascade that runs when the
previous stage completes. ``completed`` and ``delayed`` are terminal.
"""

from enum import Enum
from typing import FrozenSet, Set, Tuple


class TaskStatus(str, Enum):
    IN_QUEUE = "in-queue"
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    DELAYED = "delayed"

    @classmethod
    def parse(cls, value) -> "TaskStatus":
        """Accept an enum member or its wire string; raises ValueError otherwise."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


TERMINAL_TASK_STATES: FrozenSet[TaskStatus] = frozenset({
    TaskStatus.COMPLETED,
    TaskStatus.DELAYED,
})

# Performed by the engine itself, never accepted from an update request
SYSTEM_TRANSITIONS: Set[Tuple[TaskStatus, TaskStatus]] = {
    (TaskStatus.IN_QUEUE, TaskStatus.PENDING),
}

_TASK_TRANSITIONS: Set[Tuple[TaskStatus, TaskStatus]] = {
    (TaskStatus.PENDING, TaskStatus.IN_PROGRESS),
    (TaskStatus.PENDING, TaskStatus.COMPLETED),
    (TaskStatus.PENDING, TaskStatus.DELAYED),

    (TaskStatus.IN_PROGRESS, TaskStatus.PENDING),
    (TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED),
    (TaskStatus.IN_PROGRESS, TaskStatus.DELAYED),
} | SYSTEM_TRANSITIONS


def is_task_terminal(status: TaskStatus) -> bool:
    return TaskStatus.parse(status) in TERMINAL_TASK_STATES


def can_transition(from_status, to_status) -> bool:
    """
    Check if a task status transition is legal.

    Writing the current status again is always allowed. Terminal states
    cannot move anywhere else.
    """
    from_status = TaskStatus.parse(from_status)
    to_status = TaskStatus.parse(to_status)

    if from_status == to_status:
        return True

    if is_task_terminal(from_status):
        return False

    return (from_status, to_status) in _TASK_TRANSITIONS


def can_request_transition(from_status, to_status) -> bool:
    """Like ``can_transition`` but excludes moves only the engine may make."""
    from_status = TaskStatus.parse(from_status)
    to_status = TaskStatus.parse(to_status)
    if (from_status, to_status) in SYSTEM_TRANSITIONS:
        return False
    return can_transition(from_status, to_status)
