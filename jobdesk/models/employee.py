# jobdesk/models/employee.py
from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import UserMixin
from ..extensions import db
from ..utils import iso

# admin|employee; set explicitly at creation, never inferred from email or name
EMPLOYEE_ROLES = ("admin", "employee")


class Employee(UserMixin, db.Model):
    __tablename__ = "employee"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    phone = db.Column(db.String(50))

    password_hash = db.Column(db.String(255))

    role = db.Column(db.String(20), nullable=False, default="employee", index=True)
    role_id = db.Column(db.Integer, db.ForeignKey("role.id", ondelete="SET NULL"), index=True, nullable=True)
    department_id = db.Column(db.Integer, db.ForeignKey("department.id", ondelete="SET NULL"), index=True, nullable=True)

    active = db.Column(db.Boolean, default=True, nullable=False)
    last_login_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    assigned_role = db.relationship("Role", lazy="joined")
    department = db.relationship("Department", back_populates="employees")

    # --- Auth helpers ---
    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return bool(self.password_hash) and check_password_hash(self.password_hash, password)

    # --- Convenience flags ---
    @property
    def is_active(self) -> bool:
        return bool(self.active)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def mark_login(self):
        self.last_login_at = datetime.utcnow()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role,
            "roleId": self.role_id,
            "departmentId": self.department_id,
            "isActive": self.is_active,
            "lastLoginAt": iso(self.last_login_at),
            "createdAt": iso(self.created_at),
        }
