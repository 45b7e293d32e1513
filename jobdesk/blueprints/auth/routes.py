# jobdesk/blueprints/auth/routes.py
import logging

from flask import jsonify
from flask_login import login_user, logout_user, login_required, current_user
from flask_wtf.csrf import generate_csrf

from ...errors import PermissionDeniedError, ValidationError
from ...extensions import db
from ...models.employee import Employee
from . import auth_bp
from .forms import LoginForm

log = logging.getLogger(__name__)


# -----------------
# Login / Logout
# -----------------

@auth_bp.post("/login")
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        raise ValidationError("Invalid login data", details=form.errors)

    email = form.email.data.strip().lower()
    employee = Employee.query.filter_by(email=email).first()
    if not employee or not employee.check_password(form.password.data):
        log.info("Failed login for %s", email)
        raise ValidationError("Invalid email or password.")

    if not employee.is_active:
        raise PermissionDeniedError("This account is deactivated. Contact an administrator.")

    login_user(employee, remember=bool(form.remember.data))
    employee.mark_login()
    db.session.commit()
    log.info("Employee %s logged in (%s)", employee.id, employee.role)
    return jsonify(_session_payload(employee))


@auth_bp.post("/logout")
@login_required
def logout():
    logout_user()
    return jsonify({"ok": True})


@auth_bp.get("/me")
@login_required
def me():
    return jsonify(_session_payload(current_user))


@auth_bp.get("/csrf")
def csrf_token():
    # send back in the X-CSRFToken header on state-changing requests
    return jsonify({"csrfToken": generate_csrf()})


def _session_payload(employee: Employee) -> dict:
    data = employee.to_dict()
    role = employee.assigned_role
    data["permissions"] = (role.permissions or {}) if role else {}
    return data
