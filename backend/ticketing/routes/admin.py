# Overview: Flask API routes for admin user management.

from flask import Blueprint, jsonify, g

from ..decorators import require_auth, require_admin
from ..errors import NotFound
from ..services import auth_service
from . import json_body


admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.get("/users")
@require_auth
@require_admin
def list_users():
    users = auth_service.list_users()
    return jsonify({"users": [user.to_dict() for user in users], "count": len(users)}), 200


@admin_bp.get("/users/<id:user_id>")
@require_auth
@require_admin
def get_user(user_id: int):
    user = auth_service.get_user(user_id)
    if not user:
        raise NotFound("User not found")
    return jsonify({"user": user.to_dict()}), 200


@admin_bp.put("/users/<id:user_id>")
@require_auth
@require_admin
def update_user(user_id: int):
    """
    Update a user.

    Request body (all optional): name, email, password, role
    A new password is rehashed before it is stored.
    """
    data = json_body()
    user = auth_service.update_user(
        user_id,
        name=data.get("name"),
        email=data.get("email"),
        password=data.get("password"),
        role=data.get("role"),
    )
    return jsonify({"user": user.to_dict()}), 200


@admin_bp.delete("/users/<id:user_id>")
@require_auth
@require_admin
def delete_user(user_id: int):
    auth_service.delete_user(user_id, acting_user_id=g.user_id)
    return jsonify({"message": "User deleted successfully"}), 200
