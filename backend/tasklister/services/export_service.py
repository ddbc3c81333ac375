# Overview: Plain-text export of an instance's tasks and import of numbered lists.

"""
Text export / import.

Export layout:

    TASKLISTER - TASK EXPORT
    Exported at: 2026-10-19 12:00 UTC
    User: alice
    Instance: acme

    ==================================================

    AVAILABLE:

    1. Buy milk
       Created by: alice | Date: 2026-10-18

    IN PROGRESS:

    1. Fix printer
       Assigned to: bob | Taken: 2026-10-19
       Created by: alice | Date: 2026-10-18

    COMPLETED:

    1. Water plants
       Completed by: bob | Date: 2026-10-19
       Created by: alice | Created: 2026-10-17

    ==================================================

    Total tasks: 3
    Available: 1 | In progress: 1 | Completed: 1

Import accepts that layout or any list of ``<n>. <text>`` lines. Metadata
lines under an entry are read until the next blank or numbered line.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime

from ..errors import ValidationError
from ..models import Instance, Task, TaskStatus
from ..time_utils import utcnow
from . import task_service
from .session_service import SessionClaim

RULE = "=" * 50

_ENTRY = re.compile(r"^\d+\.\s*(.*)$")
_ASSIGNED = re.compile(r"Assigned to:\s*([^|]+)")
_COMPLETED = re.compile(r"Completed by:\s*([^|]+)")
_CREATED = re.compile(r"Created by:\s*([^|]+)")


@dataclass
class ImportedEntry:
    text: str
    status: TaskStatus = TaskStatus.AVAILABLE
    owner_name: str | None = None
    created_by_name: str | None = None


def _date(dt: datetime | None) -> str:
    return dt.strftime("%Y-%m-%d") if dt else "-"


def export_filename(instance: Instance, now: datetime | None = None) -> str:
    return f"tasklister_export_{instance.slug}_{_date(now or utcnow())}.txt"


def export_tasks(instance: Instance, claim: SessionClaim, now: datetime | None = None) -> str:
    """Render every task of ``instance`` as a plain-text report."""
    now = now or utcnow()
    tasks = task_service.list_tasks(instance.id, claim)
    available = [t for t in tasks if t.status == TaskStatus.AVAILABLE]
    taken = [t for t in tasks if t.status == TaskStatus.TAKEN]
    completed = [t for t in tasks if t.status == TaskStatus.COMPLETED]

    lines = [
        "TASKLISTER - TASK EXPORT",
        f"Exported at: {now.strftime('%Y-%m-%d %H:%M')} UTC",
        f"User: {claim.username}",
        f"Instance: {instance.slug}",
        "",
        RULE,
        "",
    ]

    if available:
        lines += ["AVAILABLE:", ""]
        for index, task in enumerate(available, start=1):
            lines.append(f"{index}. {task.text}")
            lines.append(f"   Created by: {task.created_by_name} | Date: {_date(task.created_at)}")
            lines.append("")
        lines.append("")

    if taken:
        lines += ["IN PROGRESS:", ""]
        for index, task in enumerate(taken, start=1):
            lines.append(f"{index}. {task.text}")
            lines.append(f"   Assigned to: {task.owner_name} | Taken: {_date(task.taken_at)}")
            lines.append(f"   Created by: {task.created_by_name} | Date: {_date(task.created_at)}")
            lines.append("")
        lines.append("")

    if completed:
        lines += ["COMPLETED:", ""]
        for index, task in enumerate(completed, start=1):
            lines.append(f"{index}. {task.text}")
            lines.append(f"   Completed by: {task.owner_name} | Date: {_date(task.completed_at)}")
            lines.append(f"   Created by: {task.created_by_name} | Created: {_date(task.created_at)}")
            lines.append("")

    lines += [
        RULE,
        "",
        f"Total tasks: {len(tasks)}",
        f"Available: {len(available)} | In progress: {len(taken)} | Completed: {len(completed)}",
    ]
    return "\n".join(lines) + "\n"


def parse_import(content: str) -> list[ImportedEntry]:
    """Pull numbered entries (and their metadata) out of ``content``."""
    lines = content.splitlines()
    entries: list[ImportedEntry] = []

    i = 0
    while i < len(lines):
        match = _ENTRY.match(lines[i].strip())
        i += 1
        if not match:
            continue
        text = match.group(1).strip()
        if not text:
            continue

        entry = ImportedEntry(text=text)
        while i < len(lines) and lines[i].strip() and not _ENTRY.match(lines[i].strip()):
            info = lines[i].strip()
            assigned = _ASSIGNED.search(info)
            if assigned:
                entry.owner_name = assigned.group(1).strip()
                entry.status = TaskStatus.TAKEN
            done = _COMPLETED.search(info)
            if done:
                entry.owner_name = done.group(1).strip()
                entry.status = TaskStatus.COMPLETED
            creator = _CREATED.search(info)
            if creator:
                entry.created_by_name = creator.group(1).strip()
            i += 1
        entries.append(entry)

    return entries


def import_tasks(instance: Instance, claim: SessionClaim, content: str | None) -> list[Task]:
    """
    Create one task per parsed entry, acting as ``claim``.

    Entries the actor held in the source (assigned or completed by the same
    username) are taken, and completed where marked, through the regular
    transitions. Everything else lands as available.
    """
    if not content or not content.strip():
        raise ValidationError("Import content is required")

    entries = parse_import(content)
    if not entries:
        raise ValidationError("No tasks found. Expected lines like '1. Task text'")

    imported = []
    for entry in entries:
        task = task_service.create_task(instance.id, claim, entry.text)
        if entry.owner_name == claim.username and entry.status != TaskStatus.AVAILABLE:
            task = task_service.take_task(instance.id, task.id, claim)
            if entry.status == TaskStatus.COMPLETED:
                task = task_service.complete_task(instance.id, task.id, claim)
        imported.append(task)
    return imported
