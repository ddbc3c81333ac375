# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/tasklister/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Instance management:
# - python -m flask instances list
#   List all instances with user and task counts.
# - python -m flask instances create --name "Acme Corp" --admin-username boss --admin-password secret
#   Register an instance and its admin (same path as POST /api/register-instance).
#
# Task inspection:
# - python -m flask tasks list --slug acme-corp [--view active]
# - python -m flask tasks export --slug acme-corp

from datetime import datetime, timezone

import click
from flask.cli import with_appcontext
from sqlalchemy import func

from .errors import TasklisterError
from .extensions import db
from .models import Role, Task, User
from .services import auth_service, export_service, instance_service, task_service
from .services.session_service import SessionClaim
from .time_utils import to_utc_z


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@click.group('instances')
def instances_group():
    """Instance (tenant) management commands."""


@instances_group.command('list')
@with_appcontext
def list_instances():
    """List all instances."""
    instances = instance_service.list_instances()
    if not instances:
        click.echo("No instances found.")
        return

    user_counts = dict(
        db.session.query(User.instance_id, func.count(User.id)).group_by(User.instance_id).all()
    )
    task_counts = dict(
        db.session.query(Task.instance_id, func.count(Task.id)).group_by(Task.instance_id).all()
    )

    click.echo(f"{'ID':<6} {'Slug':<30} {'Company':<30} {'Users':<6} {'Tasks':<6}")
    click.echo("-" * 82)
    for instance in instances:
        click.echo(
            f"{instance.id:<6} {instance.slug:<30} {instance.company_name:<30} "
            f"{user_counts.get(instance.id, 0):<6} {task_counts.get(instance.id, 0):<6}"
        )


@instances_group.command('create')
@click.option('--name', prompt=True, help='Company / display name')
@click.option('--admin-username', prompt=True, help='Admin username')
@click.option('--admin-password', prompt=True, hide_input=True, confirmation_prompt=True, help='Admin password')
@with_appcontext
def create_instance(name, admin_username, admin_password):
    """Register a new instance with its admin account."""
    try:
        instance, admin, _token = auth_service.register_instance(name, admin_username, admin_password)
    except TasklisterError as exc:
        raise click.ClickException(exc.message)

    click.echo(f"PASS Created instance '{instance.company_name}' at /{instance.slug}")
    click.echo(f"     Admin: {admin.username} (ID: {admin.id})")


@click.group('tasks')
def tasks_group():
    """Task inspection commands."""


def _operator_claim(instance) -> SessionClaim:
    """Identity for CLI listings: the instance's admin, never signed or issued."""
    admin = db.session.query(User).filter_by(instance_id=instance.id, role=Role.ADMIN).first()
    if not admin:
        raise click.ClickException(f"Instance '{instance.slug}' has no admin account")
    return SessionClaim(
        user_id=admin.id,
        instance_id=instance.id,
        role=admin.role,
        username=admin.username,
        expires_at=datetime.now(timezone.utc),
    )


@tasks_group.command('list')
@click.option('--slug', required=True, help='Instance slug')
@click.option('--view', default='all', type=click.Choice(sorted(task_service.VALID_VIEWS)), help='Task view')
@with_appcontext
def list_tasks(slug, view):
    """List the tasks of one instance, newest first."""
    try:
        instance = instance_service.require_instance(slug)
        tasks = task_service.list_tasks(instance.id, _operator_claim(instance), view=view)
    except TasklisterError as exc:
        raise click.ClickException(exc.message)

    if not tasks:
        click.echo("No tasks found.")
        return

    click.echo(f"{'ID':<6} {'Status':<10} {'Owner':<16} {'Created by':<16} {'Created':<21} Text")
    click.echo("-" * 100)
    for task in tasks:
        click.echo(
            f"{task.id:<6} {task.status.value:<10} {(task.owner_name or '-'):<16} "
            f"{task.created_by_name:<16} {to_utc_z(task.created_at):<21} {task.text}"
        )


@tasks_group.command('export')
@click.option('--slug', required=True, help='Instance slug')
@with_appcontext
def export_tasks(slug):
    """Print the plain-text export of an instance's tasks."""
    try:
        instance = instance_service.require_instance(slug)
        content = export_service.export_tasks(instance, _operator_claim(instance))
    except TasklisterError as exc:
        raise click.ClickException(exc.message)
    click.echo(content, nl=False)


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(instances_group)
    app.cli.add_command(tasks_group)
