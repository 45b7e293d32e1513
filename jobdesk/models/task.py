# jobdesk/models/task.py
from datetime import datetime
from ..extensions import db
from ..utils import iso


class Task(db.Model):
    """One workflow stage of a job.

    Rows are written in bulk by the task generator and mutated through
    ``jobdesk.workflow.progression``; ``status`` holds a ``TaskStatus`` value.
    """
    __tablename__ = "task"
    __table_args__ = (
        db.UniqueConstraint("job_id", "order", name="uq_task_job_order"),
    )

    id = db.Column(db.Integer, primary_key=True)
    job_id = db.Column(db.Integer, db.ForeignKey("job.id", ondelete="CASCADE"), nullable=False, index=True)
    department_id = db.Column(db.Integer, db.ForeignKey("department.id"), nullable=False, index=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employee.id", ondelete="SET NULL"), index=True, nullable=True)

    order = db.Column(db.Integer, nullable=False)  # 1-based position within the job
    deadline = db.Column(db.DateTime, nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default="in-queue", index=True)
    remarks = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    job = db.relationship("Job", back_populates="tasks")
    department = db.relationship("Department", lazy="joined")
    employee = db.relationship("Employee", lazy="joined")

    @property
    def stage(self):
        return self.department.name if self.department else None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "jobId": self.job_id,
            "departmentId": self.department_id,
            "stage": self.stage,
            "order": self.order,
            "deadline": iso(self.deadline),
            "status": self.status,
            "employeeId": self.employee_id,
            "remarks": self.remarks,
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }

    def __repr__(self):
        return f"<Task id={self.id} job_id={self.job_id} order={self.order} status={self.status}>"
