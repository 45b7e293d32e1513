from flask import jsonify, request
from flask_login import login_required
from ...models.job import Job
from ...security import permission_required
from ...services.job_service import create_job, delete_job, get_job, parse_stage_deadlines, update_job
from .forms import JobForm, JobUpdateForm, bind, json_payload
from . import api_bp


@api_bp.get("/jobs")
@login_required
@permission_required("jobs", "view")
def jobs_list():
    qry = Job.query
    status = (request.args.get("status") or "").strip()
    if status:
        qry = qry.filter(Job.status == status)
    client_id = request.args.get("clientId", type=int)
    if client_id:
        qry = qry.filter(Job.client_id == client_id)
    jobs = qry.order_by(Job.created_at.desc(), Job.id.desc()).all()
    return jsonify([j.to_dict() for j in jobs])


@api_bp.get("/jobs/<int:job_id>")
@login_required
@permission_required("jobs", "view")
def job_detail(job_id):
    return jsonify(get_job(job_id).to_dict(with_tasks=True))


@api_bp.post("/jobs")
@login_required
@permission_required("jobs", "create")
def job_create():
    payload = json_payload()
    form = bind(JobForm, payload)
    stage_deadlines = parse_stage_deadlines(payload.get("stageDeadlines"))

    job = create_job(form.job_fields(), stage_deadlines)
    return jsonify(job.to_dict(with_tasks=True)), 201


@api_bp.patch("/jobs/<int:job_id>")
@login_required
@permission_required("jobs", "edit")
def job_update(job_id):
    job = get_job(job_id)
    form = bind(JobUpdateForm, {**job.to_dict(), **json_payload()})
    job = update_job(job_id, form.job_fields())
    return jsonify(job.to_dict(with_tasks=True))


@api_bp.delete("/jobs/<int:job_id>")
@login_required
@permission_required("jobs", "delete")
def job_delete(job_id):
    delete_job(job_id)
    return "", 204
