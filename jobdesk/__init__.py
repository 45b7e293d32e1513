import os
from pathlib import Path
import logging
from logging.handlers import RotatingFileHandler
from flask import Flask
from .extensions import db, migrate, login_manager, csrf
from .config import Config
from .models.employee import Employee

# Blueprints
from .blueprints.errors import errors_bp
from .blueprints.auth import auth_bp
from .blueprints.api import api_bp
from .blueprints.api.files import files_bp


# Optional: Sentry
def _init_sentry(app):
    dsn = app.config.get("SENTRY_DSN")
    if not dsn:
        return
    try:
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration
        from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

        sentry_sdk.init(
            dsn=dsn,
            integrations=[FlaskIntegration(), SqlalchemyIntegration()],
            traces_sample_rate=app.config.get("SENTRY_TRACES_SAMPLE_RATE", 0.0),
            environment=os.getenv("ENV", "development"),
            release=os.getenv("GIT_COMMIT", None),
            send_default_pii=False,
        )
        app.logger.info("Sentry initialized.")
    except Exception as e:
        app.logger.warning(f"Sentry init failed: {e}")

def _init_logging(app):
    # Base level
    level_name = app.config.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    app.logger.setLevel(level)

    # Ensure log dir exists
    log_dir = Path(app.config.get("LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / app.config.get("LOG_FILENAME", "jobdesk.log")

    # Formatter: text or JSON
    if app.config.get("LOG_JSON", False):
        import json_log_formatter
        formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("[%(asctime)s] %(levelname)s in %(module)s: %(message)s")

    # app.logger is the "jobdesk" logger, so module loggers (jobdesk.workflow.*)
    # propagate into these handlers. Drop the ones a previous app instance added.
    for handler in [h for h in app.logger.handlers if getattr(h, "_jobdesk", False)]:
        app.logger.removeHandler(handler)
        handler.close()

    # Rotating file handler (5MB x 5)
    file_handler = RotatingFileHandler(
        log_path, maxBytes=5_000_000, backupCount=5, encoding="utf-8"
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    file_handler._jobdesk = True
    app.logger.addHandler(file_handler)

    # Stream to stdout as well (useful on dev/docker)
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    stream_handler._jobdesk = True
    app.logger.addHandler(stream_handler)

    app.logger.info("Logging initialized.")

def create_app(config_object=None):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object or Config)

    app.config.setdefault("SECRET_KEY", "change-me")
    app.config.setdefault(
        "SQLALCHEMY_DATABASE_URI",
        "sqlite:///" + os.path.join(app.instance_path, "jobdesk.db"),
    )
    app.config.setdefault("SQLALCHEMY_TRACK_MODIFICATIONS", False)

    # ensure instance & uploads
    Path(app.instance_path).mkdir(parents=True, exist_ok=True)
    app.config.setdefault("UPLOAD_FOLDER", str(Path(app.instance_path) / "uploads"))
    app.config.setdefault("MAX_CONTENT_LENGTH", 5 * 1024 * 1024)
    app.config.setdefault("ALLOWED_EXTENSIONS", {"pdf", "png", "jpg", "jpeg"})
    app.config.setdefault("DEADLINE_ALERT_DAYS", 3)
    Path(app.config["UPLOAD_FOLDER"]).mkdir(parents=True, exist_ok=True)

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        employee = db.session.get(Employee, int(user_id))
        return employee if employee and employee.is_active else None

    # Logging must come before blueprints so errors during register are captured
    _init_logging(app)
    _init_sentry(app)

    # Blueprints
    app.register_blueprint(errors_bp)  # error handlers
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(files_bp)

    from .commands import register_commands
    register_commands(app)

    @app.get("/health")
    def health():
        return {"ok": True, "version": app.config.get("APP_VERSION")}

    return app
