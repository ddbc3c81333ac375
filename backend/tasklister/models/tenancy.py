from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class Instance(db.Model):
    """
    Tenant root: every shared task list is an Instance.

    The slug is the public address of the instance (``/<slug>``) and the
    only way requests reach its users and tasks. Slug and company name are
    fixed at registration.
    """
    __tablename__ = "instances"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    slug = db.Column(db.String(255), nullable=False, unique=True, index=True)
    company_name = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Instance id={self.id} slug={self.slug!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "slug": self.slug,
            "company_name": self.company_name,
            "created_at": to_utc_z(self.created_at),
        }

    def to_public_dict(self) -> dict:
        """Fields safe to show before login."""
        return {
            "slug": self.slug,
            "company_name": self.company_name,
        }
