# jobdesk/models/job.py
from datetime import datetime
from ..extensions import db
from ..utils import iso

JOB_TYPES = ("Carton", "Booklet", "Pouch Folder", "Flyers", "Business Cards", "Brochures")
# pending|in-production|delivered|completed; the workflow engine never writes it
JOB_STATUSES = ("pending", "in-production", "delivered", "completed")


class Job(db.Model):
    __tablename__ = "job"

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey("client.id", ondelete="SET NULL"), index=True, nullable=True)

    job_type = db.Column(db.String(50), nullable=False, index=True)
    description = db.Column(db.Text)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    size = db.Column(db.String(80))
    colors = db.Column(db.String(80))
    finishing_options = db.Column(db.Text)
    po_file_url = db.Column(db.String(512))

    deadline = db.Column(db.DateTime, nullable=False, index=True)
    status = db.Column(db.String(20), default="pending", nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    client = db.relationship("Client", back_populates="jobs")

    # Tasks live and die with their job
    tasks = db.relationship(
        "Task",
        back_populates="job",
        lazy="selectin",
        order_by="Task.order",
        cascade="all, delete-orphan",
    )

    def to_dict(self, with_tasks: bool = False) -> dict:
        data = {
            "id": self.id,
            "clientId": self.client_id,
            "jobType": self.job_type,
            "description": self.description,
            "quantity": self.quantity,
            "size": self.size,
            "colors": self.colors,
            "finishingOptions": self.finishing_options,
            "poFileUrl": self.po_file_url,
            "deadline": iso(self.deadline),
            "status": self.status,
            "createdAt": iso(self.created_at),
        }
        if with_tasks:
            data["tasks"] = [t.to_dict() for t in self.tasks]
        return data

    def __repr__(self):
        return f"<Job id={self.id} type={self.job_type!r} deadline={self.deadline}>"
