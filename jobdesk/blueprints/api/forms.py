# jobdesk/blueprints/api/forms.py
"""WTForms used to validate JSON request bodies."""
from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import StringField, IntegerField, PasswordField, BooleanField
from wtforms.validators import DataRequired, InputRequired, Email, Length, NumberRange, Optional, AnyOf, ValidationError

from ...errors import ValidationError as DomainValidationError
from ...models.client import PAYMENT_METHODS
from ...models.employee import EMPLOYEE_ROLES
from ...models.job import JOB_STATUSES, JOB_TYPES
from ...utils import parse_dt
from ...workflow.status import TaskStatus


class ApiForm(FlaskForm):
    class Meta:
        csrf = False  # header token is checked by CSRFProtect


def _iso_datetime(form, field):
    if field.data in (None, ""):
        return
    if parse_dt(field.data) is None:
        raise ValidationError("Not a valid ISO-8601 date.")


class JobForm(ApiForm):
    clientId = IntegerField("Client", validators=[Optional()])
    jobType = StringField("Job type", validators=[DataRequired(), AnyOf(JOB_TYPES)])
    description = StringField("Description", validators=[Optional()])
    quantity = IntegerField("Quantity", validators=[InputRequired(), NumberRange(min=1)])
    size = StringField("Size", validators=[Optional(), Length(max=80)])
    colors = StringField("Colors", validators=[Optional(), Length(max=80)])
    finishingOptions = StringField("Finishing options", validators=[Optional()])
    poFileUrl = StringField("PO file", validators=[Optional(), Length(max=512)])
    deadline = StringField("Deadline", validators=[DataRequired(), _iso_datetime])

    def job_fields(self) -> dict:
        return {
            "client_id": self.clientId.data,
            "job_type": self.jobType.data.strip(),
            "description": self.description.data or None,
            "quantity": self.quantity.data,
            "size": self.size.data or None,
            "colors": self.colors.data or None,
            "finishing_options": self.finishingOptions.data or None,
            "po_file_url": self.poFileUrl.data or None,
            "deadline": parse_dt(self.deadline.data),
        }


class JobUpdateForm(JobForm):
    status = StringField("Status", validators=[Optional(), AnyOf(JOB_STATUSES)])

    def job_fields(self) -> dict:
        fields = super().job_fields()
        fields["status"] = self.status.data or "pending"
        return fields


class TaskUpdateForm(ApiForm):
    status = StringField("Status", validators=[Optional(), AnyOf([s.value for s in TaskStatus])])
    employeeId = IntegerField("Employee", validators=[Optional()])
    remarks = StringField("Remarks", validators=[Optional(), Length(max=5000)])


class TaskCreateForm(ApiForm):
    jobId = IntegerField("Job", validators=[InputRequired()])
    departmentId = IntegerField("Department", validators=[InputRequired()])
    order = IntegerField("Order", validators=[InputRequired(), NumberRange(min=1)])
    deadline = StringField("Deadline", validators=[DataRequired(), _iso_datetime])
    status = StringField("Status", validators=[Optional(), AnyOf([s.value for s in TaskStatus])])
    employeeId = IntegerField("Employee", validators=[Optional()])
    remarks = StringField("Remarks", validators=[Optional()])


class DepartmentForm(ApiForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=120)])
    order = IntegerField("Order", validators=[InputRequired(), NumberRange(min=0)])
    description = StringField("Description", validators=[Optional()])


class EmployeeForm(ApiForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=120)])
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=255)])
    phone = StringField("Phone", validators=[Optional(), Length(max=50)])
    role = StringField("Role", validators=[Optional(), AnyOf(EMPLOYEE_ROLES)])
    roleId = IntegerField("Permission role", validators=[Optional()])
    departmentId = IntegerField("Department", validators=[Optional()])
    password = PasswordField("Password", validators=[Optional(), Length(min=8, max=128)])
    isActive = BooleanField("Active", default=True)


class RoleForm(ApiForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=80)])
    description = StringField("Description", validators=[Optional()])


class ClientForm(ApiForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=120)])
    company = StringField("Company", validators=[DataRequired(), Length(max=160)])
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=255)])
    phone = StringField("Phone", validators=[DataRequired(), Length(max=50)])
    address = StringField("Address", validators=[Optional()])
    gstNo = StringField("GST no", validators=[Optional(), Length(max=32)])
    paymentMethod = StringField("Payment method", validators=[Optional(), AnyOf(PAYMENT_METHODS)])


# ---- binding helpers ----

def json_payload() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise DomainValidationError("Request body must be a JSON object.")
    return payload


def bind(form_cls, payload: dict):
    """Validate ``payload`` with ``form_cls``; raise a 400 with field errors when it fails.

    JSON nulls and nested objects are left out of the form data, so callers
    check ``key in payload`` for fields where null has a meaning.
    """
    scalars = MultiDict({
        k: v for k, v in payload.items()
        if v is not None and not isinstance(v, (dict, list))
    })
    form = form_cls(formdata=scalars)
    if not form.validate():
        raise DomainValidationError("Invalid input", details=form.errors)
    return form
