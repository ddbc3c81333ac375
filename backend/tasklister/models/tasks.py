from __future__ import annotations

import enum

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class TaskStatus(str, enum.Enum):
    AVAILABLE = "available"
    TAKEN = "taken"
    COMPLETED = "completed"


class Task(db.Model):
    """
    A unit of work on an instance's shared list.

    Lifecycle: available -> taken -> completed, with taken -> available when
    the owner hands it back. Nothing leaves completed; deletion is a hard
    delete outside the lifecycle.

    Consistency between status and owner fields:
    - available: owner_id, owner_name, taken_at are NULL
    - taken: owner fields set, completed_at NULL
    - completed: completed_at set, owner fields keep the completer

    The *_name columns are snapshots of the acting user's username at write
    time.
    """
    __tablename__ = "tasks"
    __table_args__ = (
        db.Index("ix_tasks_instance_created", "instance_id", "created_at"),
        db.Index("ix_tasks_instance_status", "instance_id", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    instance_id = db.Column(db.Integer, db.ForeignKey("instances.id"), nullable=False, index=True)

    text = db.Column(db.Text, nullable=False)
    status = db.Column(
        db.Enum(
            TaskStatus,
            name="task_status",
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=TaskStatus.AVAILABLE,
    )

    created_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_by_name = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    owner_name = db.Column(db.String(255), nullable=True)
    taken_at = db.Column(db.DateTime(timezone=True), nullable=True)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    edited_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    edited_by_name = db.Column(db.String(255), nullable=True)
    edited_at = db.Column(db.DateTime(timezone=True), nullable=True)

    instance = db.relationship("Instance", backref=db.backref("tasks", lazy=True))

    def __repr__(self) -> str:
        return f"<Task id={self.id} status={self.status.value} instance_id={self.instance_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "instance_id": self.instance_id,
            "text": self.text,
            "status": self.status.value,
            "created_by_id": self.created_by_id,
            "created_by_name": self.created_by_name,
            "created_at": to_utc_z(self.created_at),
            "owner_id": self.owner_id,
            "owner_name": self.owner_name,
            "taken_at": to_utc_z(self.taken_at),
            "completed_at": to_utc_z(self.completed_at),
            "edited_by_id": self.edited_by_id,
            "edited_by_name": self.edited_by_name,
            "edited_at": to_utc_z(self.edited_at),
        }
