from __future__ import annotations

import enum

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class Role(str, enum.Enum):
    """The two roles an instance knows about."""

    ADMIN = "admin"
    USER = "user"


class User(db.Model):
    """
    Accounts inside one instance.

    MULTI-TENANT: Users belong to exactly one instance (instance_id).
    Usernames are unique within an instance, across both roles; the first
    account to claim a name keeps it.

    Only the admin created at registration carries a password hash.
    Nickname users are created on their first login and never have one.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("instance_id", "username", name="uq_users_instance_username"),
        db.Index("ix_users_instance_id", "instance_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    instance_id = db.Column(db.Integer, db.ForeignKey("instances.id"), nullable=False)

    username = db.Column(db.String(255), nullable=False)

    # Bcrypt hashed password (admins only)
    password_hash = db.Column(db.String(255), nullable=True)

    role = db.Column(
        db.Enum(
            Role,
            name="user_role",
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=Role.USER,
    )

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    instance = db.relationship("Instance", backref=db.backref("users", lazy=True))

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} role={self.role.value}>"

    def to_public_dict(self) -> dict:
        """Identity returned to clients after login."""
        return {
            "id": self.id,
            "username": self.username,
            "role": self.role.value,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "instance_id": self.instance_id,
            "username": self.username,
            "role": self.role.value,
            "created_at": to_utc_z(self.created_at),
            "last_login_at": to_utc_z(self.last_login_at) if self.last_login_at else None,
        }
