from flask import request, jsonify
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    get_jwt_identity,
    jwt_required,
)
from website_admin.extensions import db
from website_admin.models.user import User
from . import api_bp


def _claims(user):
    return {
        "role": user.role,
        "permissions": user.permissions,
        "name": user.label,
    }


@api_bp.route("/auth/login", methods=["POST"])
def login():
    data = request.get_json(silent=True)
    if not data:
        return jsonify({"error": "Invalid request body"}), 400

    email = (data.get("email") or "").strip().lower()
    password = data.get("password")

    if not email or not password:
        return jsonify({"error": "Email and password required"}), 400

    user = User.query.filter_by(email=email).first()

    if not user or not user.check_password(password):
        return jsonify({"error": "Invalid credentials"}), 401

    if not user.is_active:
        return jsonify({"error": "User account disabled"}), 403

    # Identity must be a string; role and permissions ride as claims
    access_token = create_access_token(identity=user.id, additional_claims=_claims(user))
    refresh_token = create_refresh_token(identity=user.id)

    return jsonify({
        "access_token": access_token,
        "refresh_token": refresh_token,
        "user": {
            "id": user.id,
            "email": user.email,
            "name": user.label,
            "role": user.role,
            "permissions": user.permissions,
        },
    }), 200


@api_bp.route("/auth/refresh", methods=["POST"])
@jwt_required(refresh=True)
def refresh():
    user = db.session.get(User, get_jwt_identity())
    if not user or not user.is_active:
        return jsonify({"error": "User account missing or disabled"}), 401

    return jsonify({
        "access_token": create_access_token(identity=user.id, additional_claims=_claims(user)),
    }), 200
