"""Pytest configuration and fixtures for JobDesk tests."""
from datetime import datetime, timedelta

import pytest

from jobdesk import create_app
from jobdesk.extensions import db as _db
from jobdesk.models import Department, Employee, Job, Role

PASSWORD = "s3cret-pass"


@pytest.fixture
def app(tmp_path):
    class TestConfig:
        TESTING = True
        SECRET_KEY = "test-secret"
        SQLALCHEMY_DATABASE_URI = "sqlite://"
        SQLALCHEMY_TRACK_MODIFICATIONS = False
        WTF_CSRF_ENABLED = False
        SESSION_COOKIE_SECURE = False
        UPLOAD_FOLDER = str(tmp_path / "uploads")
        LOG_DIR = str(tmp_path / "logs")
        LOG_LEVEL = "WARNING"
        DEADLINE_ALERT_DAYS = 3

    app = create_app(TestConfig)
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def departments(db):
    """Three stages inserted out of order; workflow order is Pre-Press, Printing, Binding."""
    binding = Department(name="Binding", order=3)
    prepress = Department(name="Pre-Press", order=1)
    printing = Department(name="Printing", order=2)
    db.session.add_all([binding, prepress, printing])
    db.session.commit()
    return [prepress, printing, binding]


def make_employee(db, name, email, role="employee", department=None, permission_role=None, active=True):
    e = Employee(
        name=name,
        email=email,
        role=role,
        department_id=department.id if department else None,
        role_id=permission_role.id if permission_role else None,
        active=active,
    )
    e.set_password(PASSWORD)
    db.session.add(e)
    db.session.commit()
    return e


@pytest.fixture
def admin(db):
    return make_employee(db, "Asha Admin", "admin@caxtonprint.com", role="admin")


@pytest.fixture
def operator_role(db):
    role = Role(
        name="Operator",
        permissions={"tasks": {"view": True, "edit": True}, "jobs": {"view": True}},
    )
    db.session.add(role)
    db.session.commit()
    return role


@pytest.fixture
def printer(db, departments, operator_role):
    """Printing-department employee with a role that can edit tasks."""
    return make_employee(db, "Pat Printer", "printer@caxtonprint.com",
                         department=departments[1], permission_role=operator_role)


@pytest.fixture
def designer(db, departments):
    """Pre-press employee with no permission role assigned."""
    return make_employee(db, "Dee Designer", "designer@caxtonprint.com", department=departments[0])


@pytest.fixture
def job(db):
    j = Job(job_type="Booklet", quantity=500, deadline=datetime.utcnow() + timedelta(days=9))
    db.session.add(j)
    db.session.commit()
    return j


def login(client, employee, password=PASSWORD):
    resp = client.post("/auth/login", json={"email": employee.email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp


@pytest.fixture
def admin_client(client, admin):
    login(client, admin)
    return client
