# jobdesk/commands.py
import click
from flask import current_app
from .extensions import db
from .models.department import Department

# Default printing workflow, in production order
DEFAULT_STAGES = (
    "Pre-Press", "Printing", "Cutting", "Folding",
    "Binding", "QC", "Packaging", "Dispatch",
)


def seed_departments(names=DEFAULT_STAGES) -> list[Department]:
    """Create any missing stage departments; existing ones keep their order."""
    existing = {d.name for d in Department.query.all()}
    start = (db.session.query(db.func.max(Department.order)).scalar() or 0)
    created = []
    for offset, name in enumerate([n for n in names if n not in existing], start=1):
        d = Department(name=name, order=start + offset)
        db.session.add(d)
        created.append(d)
    db.session.commit()
    return created


def register_commands(app):
    @app.cli.command("seed-departments")
    def seed_departments_command():
        """Create the default printing stages."""
        created = seed_departments()
        current_app.logger.info("Seeded %d department(s).", len(created))
        click.echo(f"Created {len(created)} department(s): {', '.join(d.name for d in created) or '-'}")
