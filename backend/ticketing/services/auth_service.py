# Overview: Service-layer operations for users; registration, login and admin user management.

"""
User service

Registration creates role=user accounts; admins and the CLI may create or
promote admins. Email is unique across the system (Conflict on duplicates).

Password hashing is an explicit step on every write path that accepts a
password (create_user, update_user). There is no model hook that rehashes
behind the caller's back.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import Conflict, InvalidRequest, NotFound
from ..extensions import db
from ..models import User, Ticket, ROLES, ROLE_USER
from ..validation import normalize_email, validate_password
from .credential_service import get_credential_service


MAX_NAME_LENGTH = 255


def _validate_name(name) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidRequest("name is required")
    name = name.strip()
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidRequest(f"name exceeds max length {MAX_NAME_LENGTH}")
    return name


def _validate_role(role) -> str:
    if role not in ROLES:
        raise InvalidRequest(f"role must be one of: {', '.join(ROLES)}")
    return role


def _email_taken(email: str, exclude_user_id: int | None = None) -> bool:
    query = db.session.query(User.id).filter(User.email == email)
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    return query.first() is not None


def _commit_user(user: User) -> None:
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        db.session.rollback()
        raise Conflict("User already exists with this email")


def create_user(name: str, email: str, password: str, role: str = ROLE_USER) -> User:
    """
    Create a user with a bcrypt-hashed password.

    Raises:
        InvalidRequest: name/email/password/role fail validation
        Conflict: email already registered
        HashingError: bcrypt failed
    """
    name = _validate_name(name)
    email = normalize_email(email)
    password = validate_password(password)
    role = _validate_role(role)

    if _email_taken(email):
        raise Conflict("User already exists with this email")

    password_hash = get_credential_service().hash_password(password)

    user = User(name=name, email=email, password_hash=password_hash, role=role)
    db.session.add(user)
    _commit_user(user)

    current_app.logger.info("Created user id=%s role=%s", user.id, user.role)
    return user


def register_user(name: str, email: str, password: str) -> User:
    """Self-registration always yields a regular user."""
    return create_user(name, email, password, role=ROLE_USER)


def authenticate(email: str, password: str) -> User | None:
    """
    Return the user for valid credentials, None otherwise.

    Unknown email and wrong password are indistinguishable to the caller.
    """
    if not isinstance(email, str) or not isinstance(password, str):
        return None

    user = db.session.query(User).filter_by(email=email.strip().lower()).first()
    if not user:
        current_app.logger.warning("Login failed: unknown email")
        return None

    if not get_credential_service().verify_password(password, user.password_hash):
        current_app.logger.warning("Login failed for user id=%s", user.id)
        return None

    return user


def get_user(user_id: int) -> User | None:
    return db.session.get(User, user_id)


def list_users() -> list[User]:
    return db.session.query(User).order_by(User.id.asc()).all()


def update_user(
    user_id: int,
    *,
    name: str | None = None,
    email: str | None = None,
    password: str | None = None,
    role: str | None = None,
) -> User:
    """
    Partial update. A supplied password is validated and rehashed here.
    """
    user = db.session.get(User, user_id)
    if not user:
        raise NotFound("User not found")

    if name is not None:
        user.name = _validate_name(name)

    if email is not None:
        email = normalize_email(email)
        if email != user.email and _email_taken(email, exclude_user_id=user.id):
            raise Conflict("User already exists with this email")
        user.email = email

    if role is not None:
        user.role = _validate_role(role)

    if password is not None:
        password = validate_password(password)
        user.password_hash = get_credential_service().hash_password(password)

    _commit_user(user)
    current_app.logger.info(
        "Updated user id=%s (password changed: %s)", user.id, password is not None
    )
    return user


def delete_user(user_id: int, acting_user_id: int | None = None) -> None:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFound("User not found")

    if acting_user_id is not None and acting_user_id == user_id:
        raise InvalidRequest("Cannot delete your own account")

    ticket_count = db.session.query(Ticket).filter_by(user_id=user_id).count()
    if ticket_count > 0:
        raise InvalidRequest("Cannot delete user with existing tickets")

    db.session.delete(user)
    db.session.commit()
    current_app.logger.info("Deleted user id=%s", user_id)
