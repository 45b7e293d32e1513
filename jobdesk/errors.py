# jobdesk/errors.py
"""Error taxonomy shared by the workflow engine and the API layer.

Every error carries the HTTP status the errors blueprint renders it with.
"""


class JobDeskError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message=None, details=None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(JobDeskError):
    status_code = 400
    message = "Invalid input"


class NotFoundError(JobDeskError):
    status_code = 404
    message = "Not found"


class PreconditionError(JobDeskError):
    status_code = 400
    message = "Operation not allowed in the current state"


class PermissionDeniedError(JobDeskError):
    status_code = 403
    message = "Access denied"


class StoreError(JobDeskError):
    status_code = 500
    message = "Storage failure"
