# jobdesk/blueprints/api/files.py
from flask import Blueprint, jsonify, request, send_from_directory
from flask_login import login_required
from werkzeug.utils import secure_filename
from ...errors import NotFoundError, ValidationError
from ...security import permission_required
from ...services.storage_service import allowed_ext, save_upload, upload_root
from . import api_bp

files_bp = Blueprint("files", __name__)


@api_bp.post("/upload")
@login_required
@permission_required("files", "create")
def upload():
    f = request.files.get("file")
    if not f or not f.filename:
        raise ValidationError("No file provided", details={"file": ["This field is required."]})
    if not allowed_ext(f.filename):
        raise ValidationError(
            "Invalid file type. Only PDF, JPG, and PNG files are allowed.",
            details={"file": ["Unsupported file type."]},
        )

    url = save_upload(f)
    size = f.content_length or (upload_root() / url.rsplit("/", 1)[-1]).stat().st_size
    return jsonify({"url": url, "filename": f.filename, "size": size}), 201


@files_bp.get("/files/<path:filename>")
@login_required
@permission_required("files", "view")
def serve_file(filename):
    safe = secure_filename(filename)
    if not safe or safe != filename or not (upload_root() / safe).is_file():
        raise NotFoundError("File not found")
    return send_from_directory(upload_root(), safe)
