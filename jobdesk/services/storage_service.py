# jobdesk/services/storage_service.py
import logging
import uuid
from pathlib import Path
from werkzeug.utils import secure_filename
from flask import current_app

log = logging.getLogger(__name__)


def upload_root() -> Path:
    # Fallback to <instance>/uploads if UPLOAD_FOLDER not configured yet
    base = current_app.config.get("UPLOAD_FOLDER")
    if not base:
        base = Path(current_app.instance_path) / "uploads"
    else:
        base = Path(base)
    base.mkdir(parents=True, exist_ok=True)
    return base

def allowed_ext(filename: str) -> bool:
    exts = current_app.config.get("ALLOWED_EXTENSIONS") or {"pdf", "png", "jpg", "jpeg"}
    suffix = Path(filename).suffix.lower().lstrip(".")
    return bool(suffix) and suffix in exts

def save_upload(file_storage) -> str:
    """
    Saves file to UPLOAD_FOLDER under a random name keeping the extension,
    returns the public URL (/files/<name>).
    """
    original = secure_filename(file_storage.filename or "")
    if not original:
        raise ValueError("Empty filename")

    stored_name = f"{uuid.uuid4()}{Path(original).suffix.lower()}"
    dest = upload_root() / stored_name
    file_storage.save(dest)
    log.info("Stored upload %s as %s", original, stored_name)
    return f"/files/{stored_name}"
