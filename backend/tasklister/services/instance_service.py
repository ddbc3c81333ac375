"""
Instance registry: slug -> tenant lookups.

Every task operation reaches its data through an instance resolved here, so
task queries are always filtered by the resolved instance id.
"""

from __future__ import annotations

from ..extensions import db
from ..errors import NotFoundError
from ..models import Instance


def get_instance_by_slug(slug: str | None) -> Instance | None:
    if not slug:
        return None
    return db.session.query(Instance).filter_by(slug=slug).first()


def require_instance(slug: str | None) -> Instance:
    """
    Resolve a slug or raise NotFoundError.

    Usage:
        instance = require_instance(slug)
        tasks = task_service.list_tasks(instance.id, claim)
    """
    instance = get_instance_by_slug(slug)
    if not instance:
        raise NotFoundError("Instance does not exist")
    return instance


def slug_in_use(slug: str) -> bool:
    return db.session.query(Instance.id).filter_by(slug=slug).first() is not None


def check_instance(slug: str) -> dict:
    """Public existence check: no auth, exposes only the display name."""
    instance = get_instance_by_slug(slug)
    if not instance:
        return {"exists": False}
    return {
        "exists": True,
        "company_name": instance.company_name,
        "companyName": instance.company_name,
        "slug": instance.slug,
    }


def list_instances() -> list[Instance]:
    return db.session.query(Instance).order_by(Instance.created_at, Instance.id).all()
