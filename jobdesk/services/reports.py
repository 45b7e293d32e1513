# jobdesk/services/reports.py
"""Read-only projections over jobs and tasks for the dashboard."""
from collections import Counter
from datetime import datetime, timedelta
from typing import Optional

from ..models.client import Client
from ..models.employee import Employee
from ..models.job import Job
from ..models.task import Task
from ..utils import iso
from ..workflow.status import TaskStatus

CLOSED_JOB_STATUSES = ("completed", "delivered")


def _job_is_open(job: Job) -> bool:
    return job.status not in CLOSED_JOB_STATUSES


def job_stats(now: Optional[datetime] = None) -> dict:
    now = now or datetime.utcnow()
    jobs = Job.query.all()
    return {
        "totalJobs": len(jobs),
        "activeJobs": sum(1 for j in jobs if _job_is_open(j)),
        "completedJobs": sum(1 for j in jobs if not _job_is_open(j)),
        "overdueJobs": sum(1 for j in jobs if _job_is_open(j) and j.deadline < now),
    }


def detailed_stats(now: Optional[datetime] = None) -> dict:
    now = now or datetime.utcnow()
    jobs = Job.query.all()
    tasks = Task.query.all()
    employees = Employee.query.filter_by(active=True).all()
    done = TaskStatus.COMPLETED.value

    by_status = Counter(t.status for t in tasks)
    task_stats = {s.value: by_status.get(s.value, 0) for s in TaskStatus}
    task_stats.update({
        "total": len(tasks),
        "unassigned": sum(1 for t in tasks if t.employee_id is None),
        "overdue": sum(1 for t in tasks if t.status != done and t.deadline < now),
    })

    workload = []
    for e in employees:
        mine = [t for t in tasks if t.employee_id == e.id]
        completed = sum(1 for t in mine if t.status == done)
        workload.append({
            "employeeId": e.id,
            "name": e.name,
            "departmentId": e.department_id,
            "activeTasks": len(mine) - completed,
            "completedTasks": completed,
            "totalTasks": len(mine),
        })

    open_client_ids = {j.client_id for j in jobs if _job_is_open(j) and j.client_id}
    return {
        "jobs": {
            "total": len(jobs),
            "active": sum(1 for j in jobs if _job_is_open(j)),
            "completed": sum(1 for j in jobs if not _job_is_open(j)),
            "overdue": sum(1 for j in jobs if _job_is_open(j) and j.deadline < now),
        },
        "tasks": task_stats,
        "jobTypes": dict(Counter(j.job_type for j in jobs)),
        "stages": dict(Counter(t.stage for t in tasks)),
        "employees": workload,
        "clients": {"total": Client.query.count(), "withActiveJobs": len(open_client_ids)},
    }


def deadline_alerts(days: int = 3, now: Optional[datetime] = None) -> list[dict]:
    """Open jobs and unfinished tasks due within ``days`` (overdue ones included), soonest first."""
    now = now or datetime.utcnow()
    horizon = now + timedelta(days=days)
    done = TaskStatus.COMPLETED.value

    alerts = []
    for job in Job.query.filter(Job.deadline <= horizon).all():
        if not _job_is_open(job):
            continue
        alerts.append({
            "id": job.id,
            "type": "job",
            "title": f"Job: {job.description or job.job_type}",
            "client": job.client.name if job.client else None,
            "deadline": iso(job.deadline),
            "status": job.status,
            "overdue": job.deadline < now,
        })

    for task in Task.query.filter(Task.deadline <= horizon, Task.status != done).all():
        alerts.append({
            "id": task.id,
            "type": "task",
            "title": f"Task: {task.stage}",
            "jobId": task.job_id,
            "employee": task.employee.name if task.employee else None,
            "stage": task.stage,
            "deadline": iso(task.deadline),
            "status": task.status,
            "overdue": task.deadline < now,
        })

    alerts.sort(key=lambda a: a["deadline"])
    return alerts


def recent_activity(limit: int = 20) -> list[dict]:
    """Newest job creations and task completions, merged by timestamp."""
    activities = []

    for job in Job.query.order_by(Job.created_at.desc()).limit(10).all():
        activities.append({
            "id": f"job-{job.id}",
            "type": "job_created",
            "title": f"New job created: {job.description or job.job_type}",
            "description": f"Client: {job.client.name if job.client else 'Unknown'}",
            "timestamp": job.created_at,
            "metadata": {"jobId": job.id, "jobType": job.job_type, "quantity": job.quantity},
        })

    completed = (
        Task.query
        .filter(Task.status == TaskStatus.COMPLETED.value)
        .order_by(Task.updated_at.desc())
        .limit(10)
        .all()
    )
    for task in completed:
        activities.append({
            "id": f"task-{task.id}",
            "type": "task_completed",
            "title": f"Task completed: {task.stage}",
            "description": f"Job #{task.job_id} ({task.job.job_type})",
            "timestamp": task.updated_at,
            "metadata": {
                "taskId": task.id,
                "jobId": task.job_id,
                "stage": task.stage,
                "employee": task.employee.name if task.employee else None,
            },
        })

    activities.sort(key=lambda a: a["timestamp"], reverse=True)
    for a in activities:
        a["timestamp"] = iso(a["timestamp"])
    return activities[:limit]
