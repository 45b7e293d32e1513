# jobdesk/workflow/deadlines.py
"""Per-stage deadline allocation for a job's department chain.

Pure functions: nothing here touches the database. Department-like objects
only need ``id``, ``name`` and ``order`` attributes.
"""
import math
from datetime import datetime, timedelta
from typing import Mapping, Optional, Sequence

from ..errors import ValidationError

ONE_DAY = timedelta(days=1)


def select_departments(departments: Sequence, stage_deadlines: Optional[Mapping] = None) -> list:
    """Return the departments taking part in the job, in workflow order.

    A non-empty ``stage_deadlines`` restricts the chain to the departments
    used as keys; an empty or missing map keeps every department.
    """
    if stage_deadlines:
        chosen = [d for d in departments if d.id in stage_deadlines]
    else:
        chosen = list(departments)
    return sorted(chosen, key=lambda d: (d.order, d.id))


def allocate_deadlines(
    departments: Sequence,
    delivery_deadline: datetime,
    stage_deadlines: Optional[Mapping] = None,
    now: Optional[datetime] = None,
) -> list[tuple]:
    """
    Produce ``(department, deadline)`` pairs in workflow order.

    A supplied ``stage_deadlines[department.id]`` is used verbatim. Any other
    stage gets an evenly spread fallback: the days left until delivery
    (at least 1) are divided across the selected stages (at least 1 day each),
    and stage ``i`` (1-based) is due ``i * days_per_stage`` days from now.

    Nothing is clamped to the delivery deadline here; ``check_allocation``
    rejects an allocation that overruns it.
    """
    stage_deadlines = stage_deadlines or {}
    chain = select_departments(departments, stage_deadlines)
    if not chain:
        return []

    now = now or datetime.utcnow()
    total_days = max(1, math.ceil((delivery_deadline - now) / ONE_DAY))
    days_per_stage = max(1, total_days // len(chain))

    allocation = []
    for i, department in enumerate(chain, start=1):
        supplied = stage_deadlines.get(department.id)
        if supplied is not None:
            deadline = supplied
        else:
            deadline = now + timedelta(days=i * days_per_stage)
        allocation.append((department, deadline))
    return allocation


def late_stages(allocation: Sequence[tuple], delivery_deadline: datetime) -> list[tuple]:
    return [(dept, deadline) for dept, deadline in allocation if deadline > delivery_deadline]


def _reject_late(late: Sequence[tuple], delivery_deadline: datetime):
    dept, _ = late[0]
    raise ValidationError(
        f"Deadline for stage '{dept.name}' is after the job delivery deadline.",
        details={
            "stageDeadlines": {
                str(d.id): [f"{d.name} deadline {dl.isoformat()} is after {delivery_deadline.isoformat()}"]
                for d, dl in late
            }
        },
    )


def check_stage_deadlines(departments: Sequence, stage_deadlines: Optional[Mapping], delivery_deadline: datetime):
    """Reject user-supplied stage deadlines that fall after the delivery deadline.

    Raises ``ValidationError`` naming the first offending stage in workflow order.
    """
    supplied = [
        (dept, stage_deadlines[dept.id])
        for dept in select_departments(departments, stage_deadlines)
        if stage_deadlines and stage_deadlines.get(dept.id) is not None
    ]
    late = late_stages(supplied, delivery_deadline)
    if late:
        _reject_late(late, delivery_deadline)


def check_allocation(allocation: Sequence[tuple], delivery_deadline: datetime, now: Optional[datetime] = None):
    """Reject an allocation with any stage, supplied or computed, due after delivery.

    A delivery deadline that has already passed is not checked: every
    computed stage lands after it by construction.
    """
    now = now or datetime.utcnow()
    if delivery_deadline <= now:
        return
    late = late_stages(allocation, delivery_deadline)
    if late:
        _reject_late(late, delivery_deadline)
