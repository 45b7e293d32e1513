# jobdesk/models/client.py
from ..extensions import db

PAYMENT_METHODS = ("Cash", "Online")


class Client(db.Model):
    __tablename__ = "client"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False, index=True)
    company = db.Column(db.String(160), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50), nullable=False)
    address = db.Column(db.Text)
    gst_no = db.Column(db.String(32))
    payment_method = db.Column(db.String(20), nullable=False, default="Cash")

    jobs = db.relationship("Job", back_populates="client", lazy="selectin")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "company": self.company,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "gstNo": self.gst_no,
            "paymentMethod": self.payment_method,
        }
