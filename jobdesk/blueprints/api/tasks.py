# jobdesk/blueprints/api/tasks.py
from flask import jsonify, request
from flask_login import login_required, current_user
from ...errors import PermissionDeniedError
from ...models.task import Task
from ...security import permission_required
from ...utils import parse_dt
from ...workflow.progression import create_task, get_task, update_task
from .forms import TaskCreateForm, TaskUpdateForm, bind, json_payload
from . import api_bp


def _ensure_visible(task: Task):
    if not current_user.is_admin and task.employee_id != current_user.id:
        raise PermissionDeniedError("Not your task.")


@api_bp.get("/tasks")
@login_required
@permission_required("tasks", "view")
def tasks_list():
    qry = Task.query
    job_id = request.args.get("jobId", type=int)
    if job_id:
        qry = qry.filter(Task.job_id == job_id)
    status = (request.args.get("status") or "").strip()
    if status:
        qry = qry.filter(Task.status == status)

    # Staff only ever see the stages handed to them
    if not current_user.is_admin:
        qry = qry.filter(Task.employee_id == current_user.id)

    tasks = qry.order_by(Task.job_id.asc(), Task.order.asc()).all()
    return jsonify([t.to_dict() for t in tasks])


@api_bp.get("/tasks/<int:task_id>")
@login_required
@permission_required("tasks", "view")
def task_detail(task_id):
    task = get_task(task_id)
    _ensure_visible(task)
    return jsonify(task.to_dict())


@api_bp.post("/tasks")
@login_required
@permission_required("tasks", "create")
def task_create():
    form = bind(TaskCreateForm, json_payload())
    task = create_task(
        job_id=form.jobId.data,
        department_id=form.departmentId.data,
        order=form.order.data,
        deadline=parse_dt(form.deadline.data),
        status=form.status.data or "pending",
        employee_id=form.employeeId.data,
        remarks=form.remarks.data or None,
    )
    return jsonify(task.to_dict()), 201


@api_bp.patch("/tasks/<int:task_id>")
@login_required
@permission_required("tasks", "edit")
def task_update(task_id):
    payload = json_payload()
    form = bind(TaskUpdateForm, payload)

    changes = {}
    if "status" in payload:
        changes["status"] = form.status.data
    if "employeeId" in payload:
        changes["employee_id"] = form.employeeId.data if payload["employeeId"] is not None else None
    if "remarks" in payload:
        changes["remarks"] = form.remarks.data if payload["remarks"] is not None else None

    task = get_task(task_id)
    if not current_user.is_admin:
        _ensure_visible(task)
        if "employee_id" in changes and changes["employee_id"] != task.employee_id:
            raise PermissionDeniedError("Only an administrator can reassign a task.")

    task = update_task(task_id, changes)
    return jsonify(task.to_dict())
