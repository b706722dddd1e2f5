from functools import wraps
from flask import g, jsonify
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from website_admin.extensions import db
from website_admin.models.user import User


def current_user_required(fn):
    """Verify the bearer token and attach the active user to ``g``."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()

        user = db.session.get(User, get_jwt_identity())
        if not user or not user.is_active:
            return jsonify({"error": "Unauthorized", "message": "User account missing or disabled"}), 401

        g.current_user = user
        return fn(*args, **kwargs)
    return wrapper


def permissions_required(*capabilities, any_of=False):
    """
    Gate an endpoint on page capabilities.
    All listed capabilities are required unless ``any_of`` is set.
    Must be applied below ``current_user_required``.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            granted = set(g.current_user.permissions)
            check = any if any_of else all

            if not check(cap in granted for cap in capabilities):
                return jsonify({
                    "error": "Forbidden",
                    "message": f"Missing permission: {' or '.join(capabilities) if any_of else ', '.join(capabilities)}",
                }), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator
