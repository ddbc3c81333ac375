# Overview: Flask API routes for the task list of one instance.

from flask import Blueprint, Response, current_app, g, jsonify, request

from ..decorators import require_admin, require_auth, require_instance
from ..errors import TasklisterError
from ..services import export_service, task_service


tasks_bp = Blueprint("tasks", __name__, url_prefix="/api/<slug>/tasks")


def _failure(exc: Exception, action: str):
    if isinstance(exc, TasklisterError):
        return jsonify(exc.to_dict()), exc.status_code
    current_app.logger.exception("Failed to %s", action)
    return jsonify({"error": "Internal server error"}), 500


@tasks_bp.get("")
@require_auth
@require_instance
def list_tasks(slug: str):
    """
    List the instance's tasks, newest first.

    Query params:
        view: all (default), active, mine, history
        q: search text, creator or owner name
    """
    try:
        tasks = task_service.list_tasks(
            g.instance.id,
            g.session_claim,
            view=request.args.get("view"),
            search=request.args.get("q"),
        )
        return jsonify([task.to_dict() for task in tasks]), 200
    except Exception as exc:
        return _failure(exc, "list tasks")


@tasks_bp.post("")
@require_auth
@require_instance
def create_task(slug: str):
    try:
        data = request.get_json(silent=True) or {}
        task = task_service.create_task(g.instance.id, g.session_claim, data.get("text"))
        return jsonify(task.to_dict()), 201
    except Exception as exc:
        return _failure(exc, "create task")


@tasks_bp.get("/summary")
@require_auth
@require_instance
def task_summary(slug: str):
    try:
        return jsonify(task_service.summarize_tasks(g.instance.id, g.session_claim)), 200
    except Exception as exc:
        return _failure(exc, "summarize tasks")


@tasks_bp.get("/export")
@require_auth
@require_instance
def export_tasks(slug: str):
    """Download the task list as a plain-text report."""
    try:
        content = export_service.export_tasks(g.instance, g.session_claim)
        filename = export_service.export_filename(g.instance)
        return Response(
            content,
            mimetype="text/plain",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    except Exception as exc:
        return _failure(exc, "export tasks")


@tasks_bp.post("/import")
@require_auth
@require_instance
def import_tasks(slug: str):
    """
    Import a numbered task list.

    Accepts JSON {"content": "..."} or a raw text/plain body.
    """
    try:
        if request.is_json:
            content = (request.get_json(silent=True) or {}).get("content")
        else:
            content = request.get_data(as_text=True)
        tasks = export_service.import_tasks(g.instance, g.session_claim, content)
        return jsonify({
            "imported": len(tasks),
            "tasks": [task.to_dict() for task in tasks],
        }), 201
    except Exception as exc:
        return _failure(exc, "import tasks")


@tasks_bp.patch("/<int:task_id>/take")
@require_auth
@require_instance
def take_task(slug: str, task_id: int):
    try:
        task = task_service.take_task(g.instance.id, task_id, g.session_claim)
        return jsonify(task.to_dict()), 200
    except Exception as exc:
        return _failure(exc, "take task")


@tasks_bp.patch("/<int:task_id>/complete")
@require_auth
@require_instance
def complete_task(slug: str, task_id: int):
    try:
        task = task_service.complete_task(g.instance.id, task_id, g.session_claim)
        return jsonify(task.to_dict()), 200
    except Exception as exc:
        return _failure(exc, "complete task")


@tasks_bp.patch("/<int:task_id>/return")
@require_auth
@require_instance
def return_task(slug: str, task_id: int):
    try:
        task = task_service.return_task(g.instance.id, task_id, g.session_claim)
        return jsonify(task.to_dict()), 200
    except Exception as exc:
        return _failure(exc, "return task")


@tasks_bp.patch("/<int:task_id>")
@require_auth
@require_instance
def edit_task(slug: str, task_id: int):
    try:
        data = request.get_json(silent=True) or {}
        task = task_service.edit_task(g.instance.id, task_id, g.session_claim, data.get("text"))
        return jsonify(task.to_dict()), 200
    except Exception as exc:
        return _failure(exc, "edit task")


@tasks_bp.delete("/<int:task_id>")
@require_auth
@require_admin
@require_instance
def delete_task(slug: str, task_id: int):
    try:
        task_service.delete_task(g.instance.id, task_id, g.session_claim)
        return jsonify({"message": "Task deleted"}), 200
    except Exception as exc:
        return _failure(exc, "delete task")
