# Overview: Flask API routes for registration, login and logout.

"""
Authentication API routes

Tokens are stateless JWTs issued by the CredentialService. Logout has no
server-side effect; clients drop the token and it expires on its own.
"""

from flask import Blueprint, jsonify, current_app

from ..errors import InvalidRequest, Unauthorized
from ..services import auth_service
from ..services.credential_service import get_credential_service
from . import json_body


auth_bp = Blueprint("auth", __name__, url_prefix="/api")


def _token_response(user, status: int):
    token = get_credential_service().issue_token(user.id, user.role)
    return jsonify({
        "token": token,
        "user": user.to_dict(),
    }), status


@auth_bp.post("/register")
def register_route():
    """
    Self-registration.

    Request body: name, email, password (6+ characters)
    Returns 201 with token and user, 409 if the email is taken.
    """
    data = json_body()
    user = auth_service.register_user(
        name=data.get("name"),
        email=data.get("email"),
        password=data.get("password"),
    )
    return _token_response(user, 201)


@auth_bp.post("/login")
def login_route():
    data = json_body()
    email = data.get("email")
    password = data.get("password")

    if not email or not password:
        raise InvalidRequest("email and password required")

    user = auth_service.authenticate(email, password)
    if not user:
        raise Unauthorized("Invalid credentials")

    current_app.logger.info("User id=%s logged in", user.id)
    return _token_response(user, 200)


@auth_bp.post("/logout")
def logout_route():
    """Client-side logout; nothing to revoke on the server."""
    return jsonify({"message": "Logged out successfully"}), 200
