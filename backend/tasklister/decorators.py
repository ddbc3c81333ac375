# Overview: Request decorators for session and instance resolution.

from functools import wraps
from flask import request, jsonify, g

from .errors import ForbiddenError, InvalidSessionError, NotFoundError, UnauthorizedError
from .services import instance_service, session_service


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def require_auth(f):
    """
    Require a valid session claim.

    Sets g.session_claim to the verified SessionClaim.

    SECURITY: Returns 401 if no Authorization header is present and 403 if
    the token cannot be verified (bad signature, expired, malformed). The
    403 body is identical for every verification failure.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        if not token:
            return jsonify(UnauthorizedError("Authentication required").to_dict()), 401

        claim = session_service.validate_session(token)
        if not claim:
            return jsonify(InvalidSessionError().to_dict()), 403

        g.session_claim = claim
        return f(*args, **kwargs)

    return decorated_function


def require_instance(f):
    """
    Resolve the <slug> route argument to an instance.

    MULTI-TENANT: Sets g.instance. Must run after @require_auth. A claim
    issued for a different instance is rejected like an invalid token, so a
    session from one instance never reads or writes another's tasks.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        claim = getattr(g, "session_claim", None)
        if claim is None:
            return jsonify(UnauthorizedError("Authentication required").to_dict()), 401

        instance = instance_service.get_instance_by_slug(kwargs.get("slug"))
        if not instance:
            return jsonify(NotFoundError("Instance does not exist").to_dict()), 404

        if claim.instance_id != instance.id:
            return jsonify(InvalidSessionError().to_dict()), 403

        g.instance = instance
        return f(*args, **kwargs)

    return decorated_function


def require_admin(f):
    """Require the session claim to carry the admin role."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        claim = getattr(g, "session_claim", None)
        if claim is None:
            return jsonify(UnauthorizedError("Authentication required").to_dict()), 401
        if not claim.is_admin:
            return jsonify(ForbiddenError("Only an admin can perform this action").to_dict()), 403
        return f(*args, **kwargs)

    return decorated_function
