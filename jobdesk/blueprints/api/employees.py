import logging
from flask import jsonify, request
from flask_login import current_user, login_required
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from ...errors import NotFoundError, PermissionDeniedError, ValidationError
from ...extensions import db
from ...models.department import Department
from ...models.employee import Employee
from ...models.role import Role
from ...security import permission_required
from .forms import EmployeeForm, bind, json_payload
from . import api_bp

log = logging.getLogger(__name__)


def _get_employee(employee_id) -> Employee:
    e = db.session.get(Employee, employee_id)
    if e is None:
        raise NotFoundError(f"Employee {employee_id} not found")
    return e


def _guard_privileges(e: Employee, form: EmployeeForm):
    """Staff with employee rights may manage colleagues but never grant themselves more."""
    if e.role == "admin":
        raise PermissionDeniedError("Only an administrator can edit an administrator account.")
    if (form.role.data or e.role or "employee") != (e.role or "employee"):
        raise PermissionDeniedError("Only an administrator can change an employee's role.")
    if e.id == current_user.id and form.roleId.data != e.role_id:
        raise PermissionDeniedError("You cannot change your own permission role.")


def _apply(e: Employee, form: EmployeeForm, payload: dict):
    if not current_user.is_admin:
        _guard_privileges(e, form)
    if form.roleId.data is not None and db.session.get(Role, form.roleId.data) is None:
        raise NotFoundError(f"Role {form.roleId.data} not found")
    if form.departmentId.data is not None and db.session.get(Department, form.departmentId.data) is None:
        raise NotFoundError(f"Department {form.departmentId.data} not found")

    e.name = form.name.data.strip()
    e.email = form.email.data.strip().lower()
    e.phone = (form.phone.data or "").strip() or None
    e.role = form.role.data or e.role or "employee"
    e.role_id = form.roleId.data
    e.department_id = form.departmentId.data
    if "isActive" in payload:
        e.active = bool(form.isActive.data)
    if form.password.data:
        e.set_password(form.password.data)


def _commit_unique_email(email):
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValidationError("Email already registered.", details={"email": [f"{email} is taken."]})


@api_bp.get("/employees")
@login_required
@permission_required("employees", "view")
def employees_list():
    qry = Employee.query
    q = (request.args.get("q") or "").strip()
    if q:
        like = f"%{q}%"
        qry = qry.filter(or_(Employee.name.ilike(like), Employee.email.ilike(like)))
    department_id = request.args.get("departmentId", type=int)
    if department_id:
        qry = qry.filter(Employee.department_id == department_id)
    return jsonify([e.to_dict() for e in qry.order_by(Employee.name.asc()).all()])


@api_bp.get("/employees/<int:employee_id>")
@login_required
@permission_required("employees", "view")
def employee_detail(employee_id):
    return jsonify(_get_employee(employee_id).to_dict())


@api_bp.post("/employees")
@login_required
@permission_required("employees", "create")
def employee_create():
    payload = json_payload()
    form = bind(EmployeeForm, payload)
    e = Employee()
    _apply(e, form, payload)
    db.session.add(e)
    _commit_unique_email(e.email)
    log.info("Employee %s created (%s, department %s)", e.id, e.role, e.department_id)
    return jsonify(e.to_dict()), 201


@api_bp.patch("/employees/<int:employee_id>")
@login_required
@permission_required("employees", "edit")
def employee_update(employee_id):
    e = _get_employee(employee_id)
    payload = json_payload()
    form = bind(EmployeeForm, {**e.to_dict(), **payload})
    _apply(e, form, payload)
    _commit_unique_email(e.email)
    return jsonify(e.to_dict())


@api_bp.delete("/employees/<int:employee_id>")
@login_required
@permission_required("employees", "delete")
def employee_delete(employee_id):
    e = _get_employee(employee_id)
    if e.role == "admin" and not current_user.is_admin:
        raise PermissionDeniedError("Only an administrator can deactivate an administrator account.")
    # soft delete keeps task history intact; tasks stay assigned for the record
    e.active = False
    db.session.commit()
    log.info("Employee %s deactivated", e.id)
    return "", 204
