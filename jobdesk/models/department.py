# jobdesk/models/department.py
from datetime import datetime
from ..extensions import db
from ..utils import iso

class Department(db.Model):
    __tablename__ = "department"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)
    # workflow position; stages run in ascending order (ties broken by id)
    order = db.Column(db.Integer, nullable=False, default=0, index=True)
    description = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    employees = db.relationship("Employee", back_populates="department", lazy="selectin")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "order": self.order,
            "description": self.description,
            "createdAt": iso(self.created_at),
        }

    def __repr__(self):
        return f"<Department id={self.id} name={self.name!r} order={self.order}>"
