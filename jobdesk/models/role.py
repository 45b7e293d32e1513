# jobdesk/models/role.py
from datetime import datetime
from ..extensions import db

PERMISSION_MODULES = (
    "clients", "employees", "jobs", "tasks",
    "departments", "roles", "reports", "files",
)
PERMISSION_ACTIONS = ("view", "create", "edit", "delete")


class Role(db.Model):
    """Named permission set assigned to non-admin employees.

    ``permissions`` maps a module to its granted actions, e.g.
    ``{"tasks": {"view": True, "edit": True}}``. Missing keys mean "not granted".
    """
    __tablename__ = "role"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(80), unique=True, nullable=False)
    description = db.Column(db.Text)
    permissions = db.Column(db.JSON, nullable=False, default=dict)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def grants(self, module: str, action: str) -> bool:
        module_perms = (self.permissions or {}).get(module) or {}
        return bool(module_perms.get(action))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "permissions": self.permissions or {},
        }
