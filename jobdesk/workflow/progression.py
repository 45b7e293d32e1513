# jobdesk/workflow/progression.py
"""
Task progression: queue gate, transition checks and the completion cascade.

INVARIANT: an ``in-queue`` task only changes status through
``unblock_next_task``. Completing stage ``k`` moves stage ``k + 1`` from
``in-queue`` to ``pending`` at most once, even when two completions race:
the move is a conditional UPDATE and the affected row count decides who won.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ..errors import NotFoundError, PreconditionError, StoreError, ValidationError
from ..extensions import db
from ..models.department import Department
from ..models.employee import Employee
from ..models.job import Job
from ..models.task import Task
from .status import TaskStatus, can_request_transition

log = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("status", "employee_id", "remarks")
QUEUE_GATED_FIELDS = ("status", "employee_id")


def get_task(task_id: int) -> Task:
    task = db.session.get(Task, task_id)
    if task is None:
        raise NotFoundError(f"Task {task_id} not found")
    return task


def tasks_for_job(job_id: int) -> list[Task]:
    return Task.query.filter_by(job_id=job_id).order_by(Task.order.asc()).all()


def unblock_next_task(task: Task) -> Optional[Task]:
    """Move the task after ``task`` from in-queue to pending; runs in the caller's transaction."""
    updated = (
        Task.query
        .filter(
            Task.job_id == task.job_id,
            Task.order == task.order + 1,
            Task.status == TaskStatus.IN_QUEUE.value,
        )
        .update(
            {Task.status: TaskStatus.PENDING.value, Task.updated_at: datetime.utcnow()},
            synchronize_session=False,
        )
    )
    if not updated:
        return None

    nxt = Task.query.filter_by(job_id=task.job_id, order=task.order + 1).first()
    db.session.refresh(nxt)
    return nxt


def update_task(task_id: int, changes: dict) -> Task:
    """
    Apply ``changes`` (any of status, employee_id, remarks) to a task.

    Raises ``NotFoundError`` for an unknown task or employee,
    ``PreconditionError`` when the task is still queued behind a prior stage
    or the status move is not allowed, and ``StoreError`` when the write
    fails (nothing is written and no cascade happens in that case).
    """
    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError("Unsupported task fields", details={k: ["Not updatable."] for k in sorted(unknown)})

    task = get_task(task_id)
    current = TaskStatus.parse(task.status)

    if current is TaskStatus.IN_QUEUE and any(f in changes for f in QUEUE_GATED_FIELDS):
        raise PreconditionError("Task is queued behind a prior stage")

    new_status = None
    if "status" in changes:
        try:
            new_status = TaskStatus.parse(changes["status"])
        except ValueError:
            raise ValidationError(
                "Invalid status",
                details={"status": [f"Must be one of: {', '.join(s.value for s in TaskStatus)}"]},
            )
        if not can_request_transition(current, new_status):
            raise PreconditionError(f"Cannot move task from {current.value} to {new_status.value}")

    if "employee_id" in changes and changes["employee_id"] is not None:
        if db.session.get(Employee, changes["employee_id"]) is None:
            raise NotFoundError(f"Employee {changes['employee_id']} not found")

    try:
        if new_status is not None:
            task.status = new_status.value
        if "employee_id" in changes:
            task.employee_id = changes["employee_id"]
        if "remarks" in changes:
            task.remarks = changes["remarks"]
        task.updated_at = datetime.utcnow()

        unblocked = None
        if new_status is TaskStatus.COMPLETED and current is not TaskStatus.COMPLETED:
            db.session.flush()
            unblocked = unblock_next_task(task)

        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        log.exception("Task %s update failed", task_id)
        raise StoreError("Failed to update task") from e

    if new_status is not None and new_status is not current:
        log.info("Task %s (job %s, order %s): %s -> %s",
                 task.id, task.job_id, task.order, current.value, new_status.value)
    if unblocked is not None:
        log.info("Task %s (job %s, order %s) unblocked", unblocked.id, unblocked.job_id, unblocked.order)
    elif new_status is TaskStatus.COMPLETED and current is not TaskStatus.COMPLETED:
        log.info("Job %s: stage %s completed, nothing queued after it", task.job_id, task.order)
    return task


def create_task(*, job_id: int, department_id: int, deadline: datetime, order: int,
                status=TaskStatus.PENDING, employee_id=None, remarks=None) -> Task:
    """Create a single task outside the generator (manual fix-ups)."""
    job = db.session.get(Job, job_id)
    if job is None:
        raise NotFoundError(f"Job {job_id} not found")
    if db.session.get(Department, department_id) is None:
        raise NotFoundError(f"Department {department_id} not found")
    if employee_id is not None and db.session.get(Employee, employee_id) is None:
        raise NotFoundError(f"Employee {employee_id} not found")
    if deadline > job.deadline:
        raise ValidationError(
            "Task deadline is after the job delivery deadline.",
            details={"deadline": ["Must not be after the job deadline."]},
        )
    if order < 1:
        raise ValidationError("Invalid order", details={"order": ["Must be 1 or greater."]})
    if Task.query.filter_by(job_id=job_id, order=order).first():
        raise ValidationError("Duplicate order", details={"order": [f"Job {job_id} already has a task at position {order}."]})

    try:
        status = TaskStatus.parse(status)
    except ValueError:
        raise ValidationError("Invalid status", details={"status": ["Unknown status."]})

    task = Task(
        job_id=job_id,
        department_id=department_id,
        employee_id=employee_id,
        order=order,
        deadline=deadline,
        status=status.value,
        remarks=remarks,
    )
    try:
        db.session.add(task)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        log.exception("Task create failed for job %s", job_id)
        raise StoreError("Failed to create task") from e
    log.info("Task %s created manually for job %s at order %s", task.id, job_id, order)
    return task
