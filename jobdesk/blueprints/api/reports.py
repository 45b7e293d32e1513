from flask import current_app, jsonify, request
from flask_login import login_required
from ...security import permission_required
from ...services import reports
from . import api_bp


@api_bp.get("/stats/jobs")
@login_required
@permission_required("reports", "view")
def stats_jobs():
    return jsonify(reports.job_stats())


@api_bp.get("/stats/detailed")
@login_required
@permission_required("reports", "view")
def stats_detailed():
    return jsonify(reports.detailed_stats())


@api_bp.get("/alerts/deadlines")
@login_required
@permission_required("reports", "view")
def alerts_deadlines():
    days = request.args.get("days", type=int) or current_app.config.get("DEADLINE_ALERT_DAYS", 3)
    return jsonify(reports.deadline_alerts(days=max(days, 0)))


@api_bp.get("/activities/recent")
@login_required
@permission_required("reports", "view")
def activities_recent():
    limit = min(max(request.args.get("limit", 20, type=int), 1), 100)
    return jsonify(reports.recent_activity(limit=limit))
