# jobdesk/workflow/generator.py
import logging
from datetime import datetime
from typing import Mapping, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from ..errors import StoreError
from ..extensions import db
from ..models.department import Department
from ..models.employee import Employee
from ..models.job import Job
from ..models.task import Task
from .deadlines import allocate_deadlines
from .status import TaskStatus

log = logging.getLogger(__name__)


def department_registry() -> list[Department]:
    return Department.query.order_by(Department.order.asc(), Department.id.asc()).all()


def first_employee_in(department_id: int) -> Optional[Employee]:
    return (
        Employee.query
        .filter_by(department_id=department_id, active=True)
        .order_by(Employee.id.asc())
        .first()
    )


def generate_tasks(
    job: Job,
    departments: Optional[Sequence[Department]] = None,
    stage_deadlines: Optional[Mapping[int, datetime]] = None,
    now: Optional[datetime] = None,
    commit: bool = True,
) -> list[Task]:
    """
    Materialize the ordered task chain for ``job``.

    The first stage starts ``pending``, the rest wait ``in-queue``. Each task
    is handed to the first active employee of its department, if any.

    With ``commit=False`` the rows are only added to the session so the caller
    can commit them together with the job; with ``commit=True`` the whole
    chain is committed at once, and a failure rolls every row back.
    """
    if departments is None:
        departments = department_registry()

    allocation = allocate_deadlines(departments, job.deadline, stage_deadlines, now=now)

    tasks = []
    try:
        for i, (department, deadline) in enumerate(allocation):
            assignee = first_employee_in(department.id)
            task = Task(
                job=job,
                department_id=department.id,
                employee_id=assignee.id if assignee else None,
                order=i + 1,
                deadline=deadline,
                status=(TaskStatus.PENDING if i == 0 else TaskStatus.IN_QUEUE).value,
            )
            db.session.add(task)
            tasks.append(task)

        if commit:
            db.session.commit()
        else:
            db.session.flush()
    except SQLAlchemyError as e:
        db.session.rollback()
        log.exception("Task generation failed for job %s", job.id)
        raise StoreError("Failed to create workflow tasks") from e

    log.info(
        "Generated %d task(s) for job %s: %s",
        len(tasks), job.id, ", ".join(d.name for d, _ in allocation) or "-",
    )
    return tasks
