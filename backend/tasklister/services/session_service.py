# Overview: Issue and verify signed session claims.

"""
Session Claims

A session is a signed JWT carrying the identity a request acts as:
{user_id, instance_id, role, username}. Claims expire SESSION_TTL_DAYS after
issuance (7 by default). Nothing is stored server-side; every protected
request re-verifies the signature and expiry.

Verification failures of any kind (bad signature, expired, malformed,
unknown role) collapse to ``None`` so callers cannot tell them apart.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from flask import current_app
from jose import JWTError, jwt

from ..models import Role, User


@dataclass(frozen=True)
class SessionClaim:
    """Identity established by a verified session token."""
    user_id: int
    instance_id: int
    role: Role
    username: str
    expires_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "instance_id": self.instance_id,
            "role": self.role.value,
            "username": self.username,
            "expires_at": self.expires_at.isoformat().replace("+00:00", "Z"),
        }


def _signing_key() -> str:
    return current_app.config["JWT_SECRET"]


def _algorithm() -> str:
    return current_app.config.get("JWT_ALGORITHM", "HS256")


def issue_session(user: User, *, now: datetime | None = None) -> str:
    """Sign a claim for ``user``; returns the encoded token."""
    issued_at = now or datetime.now(timezone.utc)
    ttl = timedelta(days=current_app.config.get("SESSION_TTL_DAYS", 7))
    payload = {
        "user_id": user.id,
        "instance_id": user.instance_id,
        "role": user.role.value,
        "username": user.username,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + ttl).timestamp()),
    }
    return jwt.encode(payload, _signing_key(), algorithm=_algorithm())


def validate_session(token: str | None) -> SessionClaim | None:
    """Verify ``token`` and return its claim, or None if it cannot be trusted."""
    if not token:
        return None

    try:
        payload = jwt.decode(token, _signing_key(), algorithms=[_algorithm()])
    except JWTError:
        return None

    try:
        return SessionClaim(
            user_id=int(payload["user_id"]),
            instance_id=int(payload["instance_id"]),
            role=Role(payload["role"]),
            username=str(payload["username"]),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
        )
    except (KeyError, TypeError, ValueError):
        return None
