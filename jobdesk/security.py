# jobdesk/security.py
import logging
from functools import wraps
from typing import NamedTuple, Optional

from flask_login import current_user

from .errors import PermissionDeniedError
from .extensions import login_manager
from .models.role import PERMISSION_ACTIONS, PERMISSION_MODULES

log = logging.getLogger(__name__)


class Decision(NamedTuple):
    allowed: bool
    reason: Optional[str] = None


def authorize(actor, module: str, action: str) -> Decision:
    """
    Decide whether ``actor`` (an Employee) may perform ``action`` on ``module``.

    Admins may do everything. Other employees need a role granting the
    action. Employees with no role assigned may still view.
    """
    if module not in PERMISSION_MODULES or action not in PERMISSION_ACTIONS:
        return Decision(False, f"Unknown permission {module}.{action}")
    if actor is None or not getattr(actor, "is_authenticated", False):
        return Decision(False, "Authentication required")
    if actor.role == "admin":
        return Decision(True)

    if actor.role_id is None:
        if action == "view":
            # TODO: confirm with the shop whether role-less staff should keep read access to every module
            log.info("Employee %s has no role; allowing view on %s", actor.id, module)
            return Decision(True)
        return Decision(False, "Access denied: No role assigned")

    role = actor.assigned_role
    if role is None:
        return Decision(False, "Access denied: Role not found")
    if not role.grants(module, action):
        return Decision(False, f"Access denied: You don't have permission to {action} {module}")
    return Decision(True)


def roles_required(*roles):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                return login_manager.unauthorized()
            if current_user.role not in roles:
                raise PermissionDeniedError(f"{' or '.join(roles).capitalize()} access required")
            return fn(*args, **kwargs)
        return wrapper
    return decorator


def permission_required(module: str, action: str):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                return login_manager.unauthorized()
            decision = authorize(current_user, module, action)
            if not decision.allowed:
                raise PermissionDeniedError(decision.reason)
            return fn(*args, **kwargs)
        return wrapper
    return decorator
