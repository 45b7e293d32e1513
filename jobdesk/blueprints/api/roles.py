from flask import jsonify
from flask_login import login_required
from sqlalchemy.exc import IntegrityError
from ...errors import NotFoundError, ValidationError
from ...extensions import db
from ...models.employee import Employee
from ...models.role import Role, PERMISSION_ACTIONS, PERMISSION_MODULES
from ...security import roles_required
from .forms import RoleForm, bind, json_payload
from . import api_bp


def _clean_permissions(raw) -> dict:
    """Keep only known modules/actions; values become booleans."""
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValidationError("Invalid permissions", details={"permissions": ["Must be an object."]})
    unknown = sorted(set(raw) - set(PERMISSION_MODULES))
    if unknown:
        raise ValidationError("Invalid permissions", details={"permissions": [f"Unknown module: {m}" for m in unknown]})
    cleaned = {}
    for module, actions in raw.items():
        actions = actions or {}
        if not isinstance(actions, dict):
            raise ValidationError("Invalid permissions", details={"permissions": [f"{module} must map actions to booleans."]})
        cleaned[module] = {a: bool(actions.get(a)) for a in PERMISSION_ACTIONS}
    return cleaned


def _get_role(role_id) -> Role:
    r = db.session.get(Role, role_id)
    if r is None:
        raise NotFoundError(f"Role {role_id} not found")
    return r


def _commit_unique_name(name):
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValidationError("Duplicate role", details={"name": [f"'{name}' already exists."]})


@api_bp.get("/roles")
@login_required
@roles_required("admin")
def roles_list():
    return jsonify([r.to_dict() for r in Role.query.order_by(Role.name.asc()).all()])


@api_bp.post("/roles")
@login_required
@roles_required("admin")
def role_create():
    payload = json_payload()
    form = bind(RoleForm, payload)
    r = Role(
        name=form.name.data.strip(),
        description=form.description.data or None,
        permissions=_clean_permissions(payload.get("permissions")),
    )
    db.session.add(r)
    _commit_unique_name(r.name)
    return jsonify(r.to_dict()), 201


@api_bp.patch("/roles/<int:role_id>")
@login_required
@roles_required("admin")
def role_update(role_id):
    r = _get_role(role_id)
    payload = json_payload()
    form = bind(RoleForm, {**r.to_dict(), **payload})
    r.name = form.name.data.strip()
    r.description = form.description.data or None
    if "permissions" in payload:
        r.permissions = _clean_permissions(payload["permissions"])
    _commit_unique_name(r.name)
    return jsonify(r.to_dict())


@api_bp.delete("/roles/<int:role_id>")
@login_required
@roles_required("admin")
def role_delete(role_id):
    r = _get_role(role_id)
    Employee.query.filter_by(role_id=r.id).update({Employee.role_id: None}, synchronize_session=False)
    db.session.delete(r)
    db.session.commit()
    return "", 204
