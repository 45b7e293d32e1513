# jobdesk/services/job_service.py
import logging
from datetime import datetime
from typing import Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..errors import NotFoundError, StoreError, ValidationError
from ..extensions import db
from ..models.client import Client
from ..models.job import Job
from ..utils import parse_dt, to_int
from ..models.job import JOB_STATUSES
from ..workflow.deadlines import allocate_deadlines, check_allocation, check_stage_deadlines, late_stages
from ..workflow.generator import department_registry, generate_tasks

log = logging.getLogger(__name__)


def parse_stage_deadlines(raw) -> dict[int, Optional[datetime]]:
    """Turn the wire map ``{"<departmentId>": "<iso>" | null}`` into ``{int: datetime | None}``."""
    if raw in (None, ""):
        return {}
    if not isinstance(raw, Mapping):
        raise ValidationError("Invalid stage deadlines", details={"stageDeadlines": ["Must be an object keyed by department id."]})

    parsed, errors = {}, {}
    for key, value in raw.items():
        dept_id = to_int(key)
        if dept_id is None:
            errors[str(key)] = ["Not a department id."]
            continue
        if value in (None, ""):
            parsed[dept_id] = None
            continue
        dt = parse_dt(value)
        if dt is None:
            errors[str(key)] = ["Not a valid ISO-8601 date."]
            continue
        parsed[dept_id] = dt
    if errors:
        raise ValidationError("Invalid stage deadlines", details={"stageDeadlines": errors})
    return parsed


def create_job(fields: dict, stage_deadlines: Optional[Mapping[int, Optional[datetime]]] = None,
               now: Optional[datetime] = None) -> Job:
    """
    Validate and create a job together with its workflow tasks.

    Every stage deadline, supplied or computed, must fall on or before the
    job deadline; otherwise nothing is written. A delivery deadline already
    in the past only bounds the supplied ones. The job row and all of its
    tasks are committed in one transaction.
    """
    stage_deadlines = dict(stage_deadlines or {})
    departments = department_registry()

    known = {d.id for d in departments}
    missing = sorted(set(stage_deadlines) - known)
    if missing:
        raise ValidationError(
            "Unknown department in stage deadlines",
            details={"stageDeadlines": {str(m): ["Department not found."] for m in missing}},
        )
    now = now or datetime.utcnow()
    check_stage_deadlines(departments, stage_deadlines, fields["deadline"])
    check_allocation(allocate_deadlines(departments, fields["deadline"], stage_deadlines, now=now),
                     fields["deadline"], now=now)

    client_id = fields.get("client_id")
    if client_id is not None and db.session.get(Client, client_id) is None:
        raise NotFoundError(f"Client {client_id} not found")

    job = Job(**fields)
    try:
        db.session.add(job)
        db.session.flush()
        tasks = generate_tasks(job, departments, stage_deadlines, now=now, commit=False)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        log.exception("Job creation failed")
        raise StoreError("Failed to create job") from e

    log.info("Job %s created (%s, deadline %s) with %d stage(s)",
             job.id, job.job_type, job.deadline.isoformat(), len(tasks))
    return job


def get_job(job_id: int) -> Job:
    job = db.session.get(Job, job_id)
    if job is None:
        raise NotFoundError(f"Job {job_id} not found")
    return job


def delete_job(job_id: int):
    job = get_job(job_id)
    try:
        db.session.delete(job)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StoreError("Failed to delete job") from e
    log.info("Job %s deleted with its tasks", job_id)



def update_job(job_id: int, fields: dict) -> Job:
    """
    Apply a full set of job ``fields`` (as produced by the update form).

    Moving the delivery deadline earlier is refused while any existing stage
    is due after the new date.
    """
    job = get_job(job_id)
    if fields.get("status") not in JOB_STATUSES:
        raise ValidationError("Invalid status", details={"status": [f"Must be one of: {', '.join(JOB_STATUSES)}"]})

    client_id = fields.get("client_id")
    if client_id is not None and db.session.get(Client, client_id) is None:
        raise NotFoundError(f"Client {client_id} not found")

    deadline = fields["deadline"]
    if deadline != job.deadline:
        late = late_stages([(t.department, t.deadline) for t in job.tasks], deadline)
        if late:
            dept, _ = late[0]
            raise ValidationError(
                f"Stage '{dept.name}' is due after the new delivery deadline.",
                details={"deadline": [f"{d.name} is due {dl.isoformat()}" for d, dl in late]},
            )

    previous = job.status
    for key, value in fields.items():
        setattr(job, key, value)
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        log.exception("Job %s update failed", job_id)
        raise StoreError("Failed to update job") from e

    if job.status != previous:
        log.info("Job %s: %s -> %s", job.id, previous, job.status)
    return job
