import logging
from flask import jsonify
from flask_login import login_required
from sqlalchemy.exc import IntegrityError
from ...errors import NotFoundError, PreconditionError, ValidationError
from ...extensions import db
from ...models.department import Department
from ...models.task import Task
from ...security import permission_required
from .forms import DepartmentForm, bind, json_payload
from . import api_bp

log = logging.getLogger(__name__)


def _get_department(department_id) -> Department:
    d = db.session.get(Department, department_id)
    if d is None:
        raise NotFoundError(f"Department {department_id} not found")
    return d


def _commit_unique_name(name):
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValidationError("Duplicate department", details={"name": [f"'{name}' already exists."]})


@api_bp.get("/departments")
@login_required
@permission_required("departments", "view")
def departments_list():
    depts = Department.query.order_by(Department.order.asc(), Department.id.asc()).all()
    return jsonify([d.to_dict() for d in depts])


@api_bp.post("/departments")
@login_required
@permission_required("departments", "create")
def department_create():
    form = bind(DepartmentForm, json_payload())
    d = Department(
        name=form.name.data.strip(),
        order=form.order.data,
        description=form.description.data or None,
    )
    db.session.add(d)
    _commit_unique_name(d.name)
    log.info("Department %s created at position %s", d.name, d.order)
    return jsonify(d.to_dict()), 201


@api_bp.patch("/departments/<int:department_id>")
@login_required
@permission_required("departments", "edit")
def department_update(department_id):
    d = _get_department(department_id)
    payload = json_payload()
    form = bind(DepartmentForm, {**d.to_dict(), **payload})
    d.name = form.name.data.strip()
    d.order = form.order.data
    d.description = form.description.data or None
    _commit_unique_name(d.name)
    return jsonify(d.to_dict())


@api_bp.delete("/departments/<int:department_id>")
@login_required
@permission_required("departments", "delete")
def department_delete(department_id):
    d = _get_department(department_id)
    if Task.query.filter_by(department_id=d.id).first():
        raise PreconditionError("Department has workflow tasks; it cannot be deleted.")
    db.session.delete(d)
    db.session.commit()
    log.info("Department %s deleted", d.name)
    return "", 204
