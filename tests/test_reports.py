"""Tests for dashboard statistics, deadline alerts and the activity feed."""
from datetime import datetime, timedelta

from conftest import login
from jobdesk.commands import DEFAULT_STAGES, seed_departments
from jobdesk.models import Department, Job
from jobdesk.services import reports
from jobdesk.workflow.generator import generate_tasks
from jobdesk.workflow.progression import update_task


def add_job(db, days, status="pending", job_type="Carton"):
    job = Job(job_type=job_type, quantity=100, deadline=datetime.utcnow() + timedelta(days=days), status=status)
    db.session.add(job)
    db.session.commit()
    return job


def test_job_stats(db):
    add_job(db, 5)
    add_job(db, -1)
    add_job(db, -2, status="delivered")

    assert reports.job_stats() == {
        "totalJobs": 3,
        "activeJobs": 2,
        "completedJobs": 1,
        "overdueJobs": 1,
    }


def test_detailed_stats_counts_tasks_and_workload(db, departments, printer, job):
    tasks = generate_tasks(job)
    update_task(tasks[0].id, {"status": "completed"})

    stats = reports.detailed_stats()
    assert stats["tasks"]["total"] == 3
    assert stats["tasks"]["completed"] == 1
    assert stats["tasks"]["pending"] == 1
    assert stats["tasks"]["in-queue"] == 1
    assert stats["stages"] == {"Pre-Press": 1, "Printing": 1, "Binding": 1}
    assert stats["jobTypes"] == {"Booklet": 1}

    mine = next(w for w in stats["employees"] if w["employeeId"] == printer.id)
    assert mine["activeTasks"] == 1
    assert mine["totalTasks"] == 1


def test_deadline_alerts_soonest_first(db):
    later = add_job(db, 2, job_type="Flyers")
    overdue = add_job(db, -1, job_type="Carton")
    add_job(db, 10)
    add_job(db, 1, status="completed")

    alerts = reports.deadline_alerts(days=3)
    assert [a["id"] for a in alerts] == [overdue.id, later.id]
    assert alerts[0]["overdue"] is True
    assert alerts[1]["overdue"] is False


def test_recent_activity_merges_jobs_and_completions(db, departments, job):
    tasks = generate_tasks(job)
    update_task(tasks[0].id, {"status": "completed"})

    feed = reports.recent_activity()
    kinds = {a["type"] for a in feed}
    assert kinds == {"job_created", "task_completed"}
    assert reports.recent_activity(limit=1)[0]["id"] in {f"job-{job.id}", f"task-{tasks[0].id}"}


def test_report_endpoints(admin_client, db, departments, job):
    generate_tasks(job)
    assert admin_client.get("/api/stats/jobs").get_json()["totalJobs"] == 1
    assert admin_client.get("/api/stats/detailed").status_code == 200
    assert admin_client.get("/api/alerts/deadlines?days=30").status_code == 200
    assert len(admin_client.get("/api/activities/recent?limit=5").get_json()) == 1


def test_reports_need_permission(client, printer):
    login(client, printer)
    assert client.get("/api/stats/jobs").status_code == 403


def test_seed_departments_is_idempotent(db, departments):
    created = seed_departments()
    assert "Pre-Press" not in [d.name for d in created]
    assert len(created) == len(DEFAULT_STAGES) - 3
    assert Department.query.count() == len(DEFAULT_STAGES)
    assert seed_departments() == []


def test_seed_departments_command(app, db):
    result = app.test_cli_runner().invoke(args=["seed-departments"])
    assert result.exit_code == 0
    assert "Created 8 department(s)" in result.output
    orders = [d.order for d in Department.query.order_by(Department.order).all()]
    assert orders == list(range(1, 9))
