"""HTTP tests for auth, master data and file uploads."""
import io

import pytest

from conftest import PASSWORD, login, make_employee
from jobdesk.models import Employee, Role


class TestAuth:

    def test_login_returns_session_payload(self, client, printer):
        resp = login(client, printer)
        data = resp.get_json()
        assert data["email"] == printer.email
        assert data["permissions"]["tasks"]["edit"] is True
        assert "passwordHash" not in data

        me = client.get("/auth/me").get_json()
        assert me["id"] == printer.id

    def test_bad_password(self, client, admin):
        resp = client.post("/auth/login", json={"email": admin.email, "password": "nope"})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Invalid email or password."

    def test_missing_fields(self, client):
        resp = client.post("/auth/login", json={})
        assert resp.status_code == 400
        assert "email" in resp.get_json()["details"]

    def test_deactivated_account(self, client, db):
        gone = make_employee(db, "Gone", "gone@caxtonprint.com", active=False)
        resp = client.post("/auth/login", json={"email": gone.email, "password": PASSWORD})
        assert resp.status_code == 403

    def test_logout(self, admin_client):
        assert admin_client.post("/auth/logout").status_code == 200
        assert admin_client.get("/auth/me").status_code == 401

    def test_csrf_token_endpoint(self, client):
        assert client.get("/auth/csrf").get_json()["csrfToken"]


class TestDepartments:

    def test_crud(self, admin_client):
        resp = admin_client.post("/api/departments", json={"name": "Lamination", "order": 4})
        assert resp.status_code == 201, resp.get_json()
        dept = resp.get_json()

        resp = admin_client.patch(f"/api/departments/{dept['id']}", json={"order": 6})
        assert resp.get_json()["order"] == 6
        assert resp.get_json()["name"] == "Lamination"

        assert admin_client.delete(f"/api/departments/{dept['id']}").status_code == 204
        assert admin_client.get("/api/departments").get_json() == []

    def test_duplicate_name(self, admin_client, departments):
        resp = admin_client.post("/api/departments", json={"name": "Printing", "order": 9})
        assert resp.status_code == 400
        assert "name" in resp.get_json()["details"]

    def test_list_in_workflow_order(self, admin_client, departments):
        names = [d["name"] for d in admin_client.get("/api/departments").get_json()]
        assert names == ["Pre-Press", "Printing", "Binding"]

    def test_department_with_tasks_is_kept(self, admin_client, departments, job):
        from jobdesk.workflow.generator import generate_tasks

        generate_tasks(job)
        resp = admin_client.delete(f"/api/departments/{departments[0].id}")
        assert resp.status_code == 400


class TestEmployees:

    def test_create_update_deactivate(self, admin_client, departments, operator_role):
        resp = admin_client.post("/api/employees", json={
            "name": "Cutter Kumar",
            "email": "Cutter@CaxtonPrint.com",
            "password": "long-enough-1",
            "departmentId": departments[2].id,
            "roleId": operator_role.id,
        })
        assert resp.status_code == 201, resp.get_json()
        emp = resp.get_json()
        assert emp["email"] == "cutter@caxtonprint.com"
        assert emp["role"] == "employee"
        assert emp["isActive"] is True

        resp = admin_client.patch(f"/api/employees/{emp['id']}", json={"phone": "98450 12345", "roleId": None})
        assert resp.get_json()["phone"] == "98450 12345"
        assert resp.get_json()["roleId"] is None
        assert resp.get_json()["departmentId"] == departments[2].id

        assert admin_client.delete(f"/api/employees/{emp['id']}").status_code == 204
        assert Employee.query.filter_by(email="cutter@caxtonprint.com").one().active is False

    def test_duplicate_email(self, admin_client, admin):
        resp = admin_client.post("/api/employees", json={"name": "Clone", "email": admin.email})
        assert resp.status_code == 400

    def test_unknown_department(self, admin_client):
        resp = admin_client.post("/api/employees", json={
            "name": "Nobody", "email": "nobody@caxtonprint.com", "departmentId": 9999,
        })
        assert resp.status_code == 404

    def test_employee_management_needs_permission(self, client, printer):
        login(client, printer)
        assert client.get("/api/employees").status_code == 403

    @pytest.fixture
    def supervisor(self, db, departments):
        role = Role(name="Supervisor", permissions={"employees": {"view": True, "create": True, "edit": True, "delete": True}})
        db.session.add(role)
        db.session.commit()
        return make_employee(db, "Sam Supervisor", "sam@caxtonprint.com",
                             department=departments[1], permission_role=role)

    def test_staff_cannot_promote_themselves(self, client, supervisor):
        login(client, supervisor)
        resp = client.patch(f"/api/employees/{supervisor.id}", json={"role": "admin"})
        assert resp.status_code == 403
        assert client.get("/api/roles").status_code == 403
        assert client.get("/auth/me").get_json()["role"] == "employee"

    def test_staff_cannot_swap_their_own_permission_role(self, client, supervisor, operator_role):
        login(client, supervisor)
        resp = client.patch(f"/api/employees/{supervisor.id}", json={"roleId": operator_role.id})
        assert resp.status_code == 403

    def test_staff_cannot_create_admins(self, client, supervisor):
        login(client, supervisor)
        resp = client.post("/api/employees", json={
            "name": "Sneaky", "email": "sneaky@caxtonprint.com", "role": "admin",
        })
        assert resp.status_code == 403
        assert Employee.query.filter_by(email="sneaky@caxtonprint.com").first() is None

    def test_staff_cannot_touch_admin_accounts(self, client, supervisor, admin):
        login(client, supervisor)
        assert client.patch(f"/api/employees/{admin.id}", json={"password": "taken-over-1"}).status_code == 403
        assert client.delete(f"/api/employees/{admin.id}").status_code == 403

    def test_staff_manage_colleagues(self, client, supervisor, printer):
        login(client, supervisor)
        resp = client.patch(f"/api/employees/{printer.id}", json={"phone": "98450 11111", "roleId": None})
        assert resp.status_code == 200, resp.get_json()
        assert resp.get_json()["roleId"] is None
        assert resp.get_json()["role"] == "employee"

    def test_admin_promotes(self, admin_client, printer):
        resp = admin_client.patch(f"/api/employees/{printer.id}", json={"role": "admin"})
        assert resp.status_code == 200
        assert resp.get_json()["role"] == "admin"


class TestRoles:

    def test_admin_manages_roles(self, admin_client):
        resp = admin_client.post("/api/roles", json={
            "name": "Dispatch",
            "permissions": {"jobs": {"view": True}, "tasks": {"view": True, "edit": 1}},
        })
        assert resp.status_code == 201, resp.get_json()
        role = resp.get_json()
        assert role["permissions"]["tasks"] == {"view": True, "create": False, "edit": True, "delete": False}

        resp = admin_client.patch(f"/api/roles/{role['id']}", json={"permissions": {"reports": {"view": True}}})
        assert list(resp.get_json()["permissions"]) == ["reports"]

        assert admin_client.delete(f"/api/roles/{role['id']}").status_code == 204

    def test_unknown_module_rejected(self, admin_client):
        resp = admin_client.post("/api/roles", json={"name": "Odd", "permissions": {"payroll": {"view": True}}})
        assert resp.status_code == 400

    def test_deleting_role_unlinks_employees(self, admin_client, printer, operator_role):
        assert admin_client.delete(f"/api/roles/{operator_role.id}").status_code == 204
        assert admin_client.get(f"/api/employees/{printer.id}").get_json()["roleId"] is None

    def test_roles_are_admin_only(self, client, printer):
        login(client, printer)
        assert client.get("/api/roles").status_code == 403


class TestClients:

    def test_crud(self, admin_client):
        resp = admin_client.post("/api/clients", json={
            "name": "Ravi",
            "company": "Acme Foods",
            "email": "ravi@acmefoods.in",
            "phone": "98450 00000",
        })
        assert resp.status_code == 201, resp.get_json()
        client_id = resp.get_json()["id"]
        assert resp.get_json()["paymentMethod"] == "Cash"

        resp = admin_client.patch(f"/api/clients/{client_id}", json={"paymentMethod": "Online"})
        assert resp.get_json()["paymentMethod"] == "Online"
        assert resp.get_json()["company"] == "Acme Foods"

        found = admin_client.get("/api/clients?q=acme").get_json()
        assert [c["id"] for c in found] == [client_id]

        assert admin_client.delete(f"/api/clients/{client_id}").status_code == 204
        assert admin_client.get(f"/api/clients/{client_id}").status_code == 404

    def test_invalid_payment_method(self, admin_client):
        resp = admin_client.post("/api/clients", json={
            "name": "Ravi", "company": "Acme", "email": "ravi@acmefoods.in",
            "phone": "1", "paymentMethod": "Barter",
        })
        assert resp.status_code == 400
        assert "paymentMethod" in resp.get_json()["details"]


class TestUploads:

    def test_upload_and_fetch_pdf(self, admin_client):
        resp = admin_client.post(
            "/api/upload",
            data={"file": (io.BytesIO(b"%PDF-1.4 purchase order"), "PO 1182.pdf")},
            content_type="multipart/form-data",
        )
        assert resp.status_code == 201, resp.get_json()
        data = resp.get_json()
        assert data["url"].startswith("/files/") and data["url"].endswith(".pdf")
        assert data["filename"] == "PO 1182.pdf"

        fetched = admin_client.get(data["url"])
        assert fetched.status_code == 200
        assert fetched.data == b"%PDF-1.4 purchase order"

    def test_rejects_other_types(self, admin_client):
        resp = admin_client.post(
            "/api/upload",
            data={"file": (io.BytesIO(b"MZ"), "setup.exe")},
            content_type="multipart/form-data",
        )
        assert resp.status_code == 400

    def test_missing_file(self, admin_client):
        resp = admin_client.post("/api/upload", data={}, content_type="multipart/form-data")
        assert resp.status_code == 400

    def test_unknown_file_is_404(self, admin_client):
        assert admin_client.get("/files/nothing-here.pdf").status_code == 404
