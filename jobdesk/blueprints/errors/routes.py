import logging
from flask import jsonify, request
from werkzeug.exceptions import HTTPException
from flask_wtf.csrf import CSRFError
from ...errors import JobDeskError, StoreError
from ...extensions import db, login_manager
from . import errors_bp

log = logging.getLogger(__name__)


def _json_error(message, code, details=None):
    body = {"error": message}
    if details:
        body["details"] = details
    return jsonify(body), code


# Domain errors (validation, not found, precondition, permission, store)
@errors_bp.app_errorhandler(JobDeskError)
def err_domain(e: JobDeskError):
    if isinstance(e, StoreError):
        # the failed write already rolled back; make sure the session is usable again
        try:
            db.session.rollback()
        except Exception:
            log.exception("rollback after store error failed")
    log.info("%s %s -> %s %s", request.method, request.path, e.status_code, e.message)
    return jsonify(e.to_dict()), e.status_code


# 401 from flask-login
@login_manager.unauthorized_handler
def err_unauthorized():
    return _json_error("Authentication required", 401)


# CSRF – typically treated as 400 Bad Request
@errors_bp.app_errorhandler(CSRFError)
def err_csrf(e):
    # e.description is human-readable
    return _json_error(e.description, 400)


# Fallback for HTTPException (404 routes, 405, 413 uploads, ...)
@errors_bp.app_errorhandler(HTTPException)
def err_http(e: HTTPException):
    return _json_error(e.description or e.name, e.code)


# Last-resort: any other Exception
@errors_bp.app_errorhandler(Exception)
def err_unexpected(e):
    try:
        db.session.rollback()
    except Exception:
        log.exception("rollback after unexpected error failed")
    log.exception("Unhandled error on %s %s", request.method, request.path)
    # Don't leak internals, just a generic 500
    return _json_error("Internal server error", 500)
