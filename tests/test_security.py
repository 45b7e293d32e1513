"""Tests for the role-based permission gate."""
from types import SimpleNamespace

from jobdesk.models import Role
from jobdesk.security import authorize


def actor(role="employee", role_id=None, assigned_role=None, id=1):
    return SimpleNamespace(id=id, is_authenticated=True, role=role, role_id=role_id, assigned_role=assigned_role)


def test_admin_can_do_anything():
    admin = actor(role="admin")
    assert authorize(admin, "roles", "delete").allowed
    assert authorize(admin, "jobs", "create").allowed


def test_role_grants_are_respected():
    role = Role(name="Operator", permissions={"tasks": {"view": True, "edit": True}})
    emp = actor(role_id=7, assigned_role=role)

    assert authorize(emp, "tasks", "edit").allowed
    decision = authorize(emp, "tasks", "delete")
    assert not decision.allowed
    assert "delete tasks" in decision.reason
    assert not authorize(emp, "jobs", "view").allowed


def test_no_role_can_only_view():
    emp = actor()
    assert authorize(emp, "clients", "view").allowed
    decision = authorize(emp, "clients", "edit")
    assert not decision.allowed
    assert decision.reason == "Access denied: No role assigned"


def test_dangling_role_id_is_denied():
    emp = actor(role_id=42, assigned_role=None)
    decision = authorize(emp, "jobs", "view")
    assert not decision.allowed
    assert decision.reason == "Access denied: Role not found"


def test_anonymous_and_unknown_permissions_are_denied():
    anon = SimpleNamespace(is_authenticated=False)
    assert not authorize(anon, "jobs", "view").allowed
    assert not authorize(None, "jobs", "view").allowed
    assert not authorize(actor(role="admin"), "payroll", "view").allowed
    assert not authorize(actor(role="admin"), "jobs", "approve").allowed
