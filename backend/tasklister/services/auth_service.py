# Overview: Service-layer operations for registration and login.

"""
Credential store: instance registration, admin login, nickname login.

MULTI-TENANT: Every user belongs to exactly one instance. Usernames are
unique per instance, across both roles.

SECURITY NOTES:
- Admin passwords hashed with bcrypt (cost from BCRYPT_ROUNDS, 12 by default)
- Unknown admin username and wrong password produce the same
  UnauthorizedError so the response does not reveal which part failed
- Nickname users have no password; their identity is self-asserted
"""

from __future__ import annotations

import bcrypt
from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..errors import ServerError, UnauthorizedError, ValidationError
from ..models import Instance, Role, User
from ..time_utils import utcnow
from . import instance_service, session_service
from .slug_service import allocate_slug, generate_slug

INVALID_CREDENTIALS = "Invalid credentials"

# bcrypt only reads the first 72 bytes; 5.x raises beyond that
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """Hash password using bcrypt with the configured cost factor."""
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str | None) -> bool:
    """
    Verify password against bcrypt hash.

    Returns False for accounts without a hash (nickname users) and for
    hashes bcrypt cannot parse.
    """
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def _require_fields(**fields: str | None) -> dict[str, str]:
    missing = [name for name, value in fields.items() if not value or not str(value).strip()]
    if missing:
        raise ValidationError("All fields are required")
    return {name: str(value) for name, value in fields.items()}


def register_instance(
    company_name: str | None,
    admin_username: str | None,
    admin_password: str | None,
) -> tuple[Instance, User, str]:
    """
    Create an instance together with its admin account.

    The slug lookup, instance insert and admin insert share one transaction.
    If anything fails the whole registration is rolled back and ServerError
    is raised.

    Returns:
        (instance, admin_user, session_token)

    Raises:
        ValidationError: a field is missing/blank, or the company name has
            no characters a slug can be built from, or the password is
            longer than bcrypt accepts
        ServerError: the transaction failed
    """
    fields = _require_fields(
        company_name=company_name,
        admin_username=admin_username,
        admin_password=admin_password,
    )
    company_name = fields["company_name"].strip()
    admin_username = fields["admin_username"].strip()

    if not generate_slug(company_name):
        raise ValidationError("Company name must contain letters or digits")
    if len(fields["admin_password"].encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

    try:
        slug = allocate_slug(company_name, instance_service.slug_in_use)
        instance = Instance(slug=slug, company_name=company_name)
        db.session.add(instance)
        db.session.flush()

        admin = User(
            instance_id=instance.id,
            username=admin_username,
            password_hash=hash_password(fields["admin_password"]),
            role=Role.ADMIN,
            last_login_at=utcnow(),
        )
        db.session.add(admin)
        db.session.commit()
    except Exception as exc:
        db.session.rollback()
        current_app.logger.exception("Instance registration rolled back")
        raise ServerError("Failed to create instance") from exc

    return instance, admin, session_service.issue_session(admin)


def authenticate_admin(slug: str | None, username: str | None, password: str | None) -> tuple[User, str]:
    """
    Log an admin in with slug, username and password.

    Returns:
        (admin_user, session_token)

    Raises:
        ValidationError: a field is missing
        NotFoundError: the slug does not resolve
        UnauthorizedError: no admin with that username, or wrong password
    """
    fields = _require_fields(slug=slug, username=username, password=password)
    instance = instance_service.require_instance(fields["slug"])

    user = db.session.query(User).filter_by(
        instance_id=instance.id,
        username=fields["username"].strip(),
        role=Role.ADMIN,
    ).first()

    if not user or not verify_password(fields["password"], user.password_hash):
        raise UnauthorizedError(INVALID_CREDENTIALS)

    _touch_last_login(user)
    return user, session_service.issue_session(user)


def login_user(slug: str | None, username: str | None) -> tuple[User, str]:
    """
    Log a nickname user in, creating the account on first use.

    The username is looked up within the instance; when absent a new user
    with role=user and no password is created. A username already held by
    the instance's admin cannot be claimed this way.

    Returns:
        (user, session_token)

    Raises:
        ValidationError: a field is missing
        NotFoundError: the slug does not resolve
        UnauthorizedError: the username belongs to the admin account
    """
    fields = _require_fields(slug=slug, username=username)
    instance = instance_service.require_instance(fields["slug"])
    username = fields["username"].strip()

    user = _get_or_create_user(instance.id, username)
    if user.is_admin:
        raise UnauthorizedError("This username requires administrator login")

    _touch_last_login(user)
    return user, session_service.issue_session(user)


def _get_or_create_user(instance_id: int, username: str) -> User:
    user = db.session.query(User).filter_by(instance_id=instance_id, username=username).first()
    if user:
        return user

    user = User(instance_id=instance_id, username=username, role=Role.USER)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Another request created the same nickname first
        db.session.rollback()
        user = db.session.query(User).filter_by(instance_id=instance_id, username=username).first()
        if user is None:
            raise ServerError("Failed to create user")
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise ServerError("Failed to create user") from exc
    return user


def _touch_last_login(user: User) -> None:
    user.last_login_at = utcnow()
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise ServerError() from exc
