# Overview: Authentication and role decorators for API routes.

from functools import wraps
from flask import request, g, current_app

from .errors import Forbidden, Unauthorized
from .extensions import db
from .models import User, ROLE_ADMIN
from .services.credential_service import get_credential_service


def _is_authenticated() -> bool:
    return getattr(g, "current_user", None) is not None


def extract_bearer_token(auth_header: str | None) -> str:
    if not auth_header:
        raise Unauthorized("Authorization header required")
    if not auth_header.startswith("Bearer "):
        raise Unauthorized("Bearer token required")
    token = auth_header[len("Bearer "):].strip()
    if not token:
        raise Unauthorized("Bearer token required")
    return token


def resolve_identity(auth_header: str | None) -> User:
    """
    Header -> token -> verified claims -> stored user.

    The user is re-read from the store so accounts deleted after the
    token was issued are rejected.
    """
    token = extract_bearer_token(auth_header)
    claims = get_credential_service().verify_token(token)

    user = db.session.get(User, claims.user_id)
    if not user:
        raise Unauthorized("User not found")
    return user


def require_auth(f):
    """
    Require a valid bearer token.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.user_id: its id
    - g.user_role: its current role (read from the store, not the token)

    Raises Unauthorized (401) if:
    - No Authorization header or no "Bearer " prefix
    - Invalid, tampered or expired token
    - User no longer exists
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = resolve_identity(request.headers.get("Authorization"))

        g.current_user = user
        g.user_id = user.id
        g.user_role = user.role

        return f(*args, **kwargs)

    return decorated_function


def require_admin(f):
    """Require the authenticated user to be an admin. Stack under @require_auth."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _is_authenticated():
            raise Unauthorized("Authentication required")
        if g.user_role != ROLE_ADMIN:
            current_app.logger.warning(
                "Admin access denied for user id=%s on %s %s",
                g.user_id, request.method, request.path,
            )
            raise Forbidden("Admin access required")
        return f(*args, **kwargs)
    return decorated_function
