# Overview: Flask API routes for registration, login and instance lookup.

"""
Authentication API routes

- POST /api/register-instance: create an instance and its admin
- POST /api/login/admin: slug + username + password
- POST /api/login/user: slug + nickname (account created on first use)
- GET  /api/check-instance/<slug>: public existence check
- GET  /api/session: echo the verified session claim
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth
from ..errors import TasklisterError
from ..services import auth_service
from ..services import instance_service


auth_bp = Blueprint("auth", __name__, url_prefix="/api")


@auth_bp.post("/register-instance")
def register_instance_route():
    """
    Register a new instance with its admin account.

    Returns the slug, the instance URL, a session token and the admin's
    public identity.
    """
    try:
        data = request.get_json(silent=True) or {}
        instance, admin, token = auth_service.register_instance(
            company_name=data.get("companyName") or data.get("company_name"),
            admin_username=data.get("adminUsername") or data.get("admin_username"),
            admin_password=data.get("adminPassword") or data.get("admin_password"),
        )
        current_app.logger.info("Registered instance %s", instance.slug)
        return jsonify({
            "message": "Instance created",
            "slug": instance.slug,
            "url": f"/{instance.slug}",
            "token": token,
            "user": admin.to_public_dict(),
        }), 201

    except TasklisterError as exc:
        return jsonify(exc.to_dict()), exc.status_code
    except Exception:
        current_app.logger.exception("Failed to register instance")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/login/admin")
def admin_login_route():
    """
    Authenticate the instance admin.

    SECURITY: unknown username and wrong password return the same 401.
    """
    try:
        data = request.get_json(silent=True) or {}
        user, token = auth_service.authenticate_admin(
            slug=data.get("slug"),
            username=data.get("username"),
            password=data.get("password"),
        )
        return jsonify({"token": token, "user": user.to_public_dict()}), 200

    except TasklisterError as exc:
        return jsonify(exc.to_dict()), exc.status_code
    except Exception:
        current_app.logger.exception("Failed to login admin")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/login/user")
def user_login_route():
    """Nickname login; the user is created if the instance has none by that name."""
    try:
        data = request.get_json(silent=True) or {}
        user, token = auth_service.login_user(
            slug=data.get("slug"),
            username=data.get("username"),
        )
        return jsonify({"token": token, "user": user.to_public_dict()}), 200

    except TasklisterError as exc:
        return jsonify(exc.to_dict()), exc.status_code
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/check-instance/<slug>")
def check_instance_route(slug: str):
    try:
        result = instance_service.check_instance(slug)
        return jsonify(result), 200 if result["exists"] else 404
    except Exception:
        current_app.logger.exception("Failed to check instance")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/session")
@require_auth
def session_route():
    """Return the verified claim so a client can restore a stored login."""
    return jsonify({"session": g.session_claim.to_dict()}), 200
