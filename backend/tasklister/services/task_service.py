# Overview: Task state machine; every transition is one conditional UPDATE.

"""
Task State Machine

    available --take--> taken --complete--> completed
        ^                 |
        +-----return------+

Take, complete, return and edit are each a single ``UPDATE ... WHERE`` keyed
on the task id and its instance plus the expected prior state: the starting
status, the current owner for complete/return, the creator for a non-admin
edit. The store applies the check and the write atomically, so two users
taking the same task at once cannot both succeed: the second UPDATE matches
no row.

Every query is filtered by the instance the request resolved from its slug;
a task id from another instance behaves exactly like a missing id.

Rules:
- create: non-empty text; any authenticated user
- take: task must be available
- complete / return: task must be taken by the actor
- edit: non-empty text; admin or the task's creator; any status
- delete: admin only; any status
"""

from __future__ import annotations

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..errors import (
    ForbiddenError,
    NotFoundError,
    ServerError,
    TaskUnavailableError,
    ValidationError,
)
from ..models import Task, TaskStatus
from ..time_utils import utcnow
from .concurrency import compare_and_swap, run_with_retry
from .session_service import SessionClaim

VIEW_ALL = "all"
VIEW_ACTIVE = "active"
VIEW_MINE = "mine"
VIEW_HISTORY = "history"
VALID_VIEWS = {VIEW_ALL, VIEW_ACTIVE, VIEW_MINE, VIEW_HISTORY}


def _clean_text(text: str | None) -> str:
    if text is None or not str(text).strip():
        raise ValidationError("Task text is required")
    return str(text)


def _scoped(instance_id: int):
    return db.session.query(Task).filter(Task.instance_id == instance_id)


def _commit() -> None:
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise ServerError() from exc


def _transition(instance_id: int, task_id: int, expected: list, values: dict) -> Task | None:
    """
    Run one compare-and-swap on a task row and return the fresh row.

    ``expected`` are extra filter clauses describing the required prior
    state. Returns None when the row did not match.
    """
    def _op() -> int:
        query = _scoped(instance_id).filter(Task.id == task_id, *expected)
        changed = compare_and_swap(query, values)
        db.session.commit()
        return changed

    try:
        changed = run_with_retry(_op)
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise ServerError() from exc

    if not changed:
        return None
    return _scoped(instance_id).filter(Task.id == task_id).populate_existing().first()


def get_task(instance_id: int, task_id: int) -> Task:
    task = _scoped(instance_id).filter(Task.id == task_id).first()
    if not task:
        raise NotFoundError("Task does not exist")
    return task


def create_task(instance_id: int, claim: SessionClaim, text: str | None) -> Task:
    """Add a new available task created by the actor."""
    text = _clean_text(text)
    task = Task(
        instance_id=instance_id,
        text=text,
        status=TaskStatus.AVAILABLE,
        created_by_id=claim.user_id,
        created_by_name=claim.username,
        created_at=utcnow(),
    )
    db.session.add(task)
    _commit()
    return task


def list_tasks(
    instance_id: int,
    claim: SessionClaim | None = None,
    view: str | None = None,
    search: str | None = None,
) -> list[Task]:
    """
    Tasks of one instance, newest first.

    view:
        all (default) - every task
        active - available and taken
        mine - taken by the actor
        history - taken and completed
    search:
        case-insensitive substring of text, creator or owner name
    """
    view = (view or VIEW_ALL).strip().lower()
    if view not in VALID_VIEWS:
        raise ValidationError(f"view must be one of: {', '.join(sorted(VALID_VIEWS))}")

    q = _scoped(instance_id)
    if view == VIEW_ACTIVE:
        q = q.filter(Task.status.in_([TaskStatus.AVAILABLE, TaskStatus.TAKEN]))
    elif view == VIEW_HISTORY:
        q = q.filter(Task.status.in_([TaskStatus.TAKEN, TaskStatus.COMPLETED]))
    elif view == VIEW_MINE:
        if claim is None:
            raise ValidationError("view=mine requires an authenticated user")
        q = q.filter(Task.status == TaskStatus.TAKEN, Task.owner_id == claim.user_id)

    if search and search.strip():
        term = search.strip().lower()
        q = q.filter(
            or_(
                func.lower(Task.text).contains(term, autoescape=True),
                func.lower(Task.created_by_name).contains(term, autoescape=True),
                func.lower(Task.owner_name).contains(term, autoescape=True),
            )
        )

    return q.order_by(Task.created_at.desc(), Task.id.desc()).all()


def summarize_tasks(instance_id: int, claim: SessionClaim) -> dict:
    """Counts per status plus how many tasks the actor currently holds."""
    rows = (
        db.session.query(Task.status, func.count(Task.id))
        .filter(Task.instance_id == instance_id)
        .group_by(Task.status)
        .all()
    )
    counts = {status.value: 0 for status in TaskStatus}
    for status, count in rows:
        counts[TaskStatus(status).value] = count

    mine = _scoped(instance_id).filter(
        Task.status == TaskStatus.TAKEN,
        Task.owner_id == claim.user_id,
    ).count()

    return {
        **counts,
        "total": sum(counts.values()),
        "mine": mine,
    }


def take_task(instance_id: int, task_id: int, claim: SessionClaim) -> Task:
    """available -> taken, owned by the actor."""
    task = _transition(
        instance_id,
        task_id,
        [Task.status == TaskStatus.AVAILABLE],
        {
            Task.status: TaskStatus.TAKEN,
            Task.owner_id: claim.user_id,
            Task.owner_name: claim.username,
            Task.taken_at: utcnow(),
        },
    )
    if task is None:
        raise TaskUnavailableError()
    return task


def complete_task(instance_id: int, task_id: int, claim: SessionClaim) -> Task:
    """taken -> completed; only the current owner may complete."""
    task = _transition(
        instance_id,
        task_id,
        [Task.status == TaskStatus.TAKEN, Task.owner_id == claim.user_id],
        {
            Task.status: TaskStatus.COMPLETED,
            Task.completed_at: utcnow(),
        },
    )
    if task is None:
        raise ForbiddenError("You are not allowed to complete this task")
    return task


def return_task(instance_id: int, task_id: int, claim: SessionClaim) -> Task:
    """taken -> available; only the current owner may hand a task back."""
    task = _transition(
        instance_id,
        task_id,
        [Task.status == TaskStatus.TAKEN, Task.owner_id == claim.user_id],
        {
            Task.status: TaskStatus.AVAILABLE,
            Task.owner_id: None,
            Task.owner_name: None,
            Task.taken_at: None,
        },
    )
    if task is None:
        raise ForbiddenError("You are not allowed to return this task")
    return task


def edit_task(instance_id: int, task_id: int, claim: SessionClaim, text: str | None) -> Task:
    """Replace a task's text. Admins may edit any task, users only their own."""
    text = _clean_text(text)
    expected = [] if claim.is_admin else [Task.created_by_id == claim.user_id]
    task = _transition(
        instance_id,
        task_id,
        expected,
        {
            Task.text: text,
            Task.edited_by_id: claim.user_id,
            Task.edited_by_name: claim.username,
            Task.edited_at: utcnow(),
        },
    )
    if task is None:
        # Missing task is 404, anything else is a permission failure
        get_task(instance_id, task_id)
        raise ForbiddenError("You are not allowed to edit this task")
    return task


def delete_task(instance_id: int, task_id: int, claim: SessionClaim) -> None:
    """Hard delete, admin only, regardless of status."""
    if not claim.is_admin:
        raise ForbiddenError("Only an admin can delete tasks")

    try:
        deleted = _scoped(instance_id).filter(Task.id == task_id).delete(synchronize_session=False)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise ServerError() from exc

    if not deleted:
        raise NotFoundError("Task does not exist")
