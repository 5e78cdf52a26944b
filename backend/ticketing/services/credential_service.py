# Overview: Password hashing and bearer-token issuance/verification.

"""
Credential Service

Passwords are hashed with bcrypt (salted, cost tunable through
BCRYPT_ROUNDS). Bearer tokens are HS256 JWTs that carry the user id and role
and expire TOKEN_TTL_HOURS after issue.

The service is built once by create_app() from an explicit CredentialConfig
and stored on the app; there is no module-level signing key. Expiry is the
only invalidation mechanism; logout is client-side.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from flask import current_app

from ..errors import InternalError, Unauthorized


class HashingError(InternalError):
    """Raised when bcrypt fails on input that passed validation."""


class TokenError(InternalError):
    """Raised when a token cannot be signed."""


class InvalidToken(Unauthorized):
    """Raised when a token is malformed, tampered with, or expired."""


@dataclass(frozen=True)
class CredentialConfig:
    secret_key: str
    algorithm: str = "HS256"
    token_ttl: timedelta = timedelta(hours=24)
    bcrypt_rounds: int = 12

    @classmethod
    def from_mapping(cls, config) -> "CredentialConfig":
        return cls(
            secret_key=config["JWT_SECRET_KEY"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            token_ttl=timedelta(hours=config.get("TOKEN_TTL_HOURS", 24)),
            bcrypt_rounds=config.get("BCRYPT_ROUNDS", 12),
        )


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    role: str
    issued_at: datetime
    expires_at: datetime


class CredentialService:
    def __init__(self, config: CredentialConfig):
        if not config.secret_key:
            raise ValueError("Token signing key must not be empty")
        self._config = config

    def hash_password(self, password: str) -> str:
        """Hash password using bcrypt with the configured cost factor."""
        try:
            salt = bcrypt.gensalt(rounds=self._config.bcrypt_rounds)
            hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
        except (ValueError, TypeError) as exc:
            raise HashingError("Failed to hash password") from exc
        return hashed.decode("utf-8")

    def verify_password(self, password: str, password_hash: str) -> bool:
        """
        Verify password against bcrypt hash.

        bcrypt.checkpw compares in constant time. Malformed hashes or
        over-long input count as a mismatch.
        """
        if not password or not password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    def issue_token(self, user_id: int, role: str, now: datetime | None = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + self._config.token_ttl
        payload = {
            "sub": str(user_id),
            "user_id": user_id,
            "role": role,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        try:
            return jwt.encode(payload, self._config.secret_key, algorithm=self._config.algorithm)
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise TokenError("Failed to generate token") from exc

    def verify_token(self, token: str, now: datetime | None = None) -> TokenClaims:
        if not token:
            raise InvalidToken("Invalid or expired token")

        options = {"require": ["exp", "iat", "sub"]}
        try:
            if now is None:
                payload = jwt.decode(
                    token,
                    self._config.secret_key,
                    algorithms=[self._config.algorithm],
                    options=options,
                )
            else:
                # Explicit clock: verify exp ourselves against the supplied time
                payload = jwt.decode(
                    token,
                    self._config.secret_key,
                    algorithms=[self._config.algorithm],
                    options={**options, "verify_exp": False, "verify_iat": False},
                )
                if int(payload["exp"]) <= int(now.timestamp()):
                    raise InvalidToken("Invalid or expired token")
        except jwt.PyJWTError as exc:
            raise InvalidToken("Invalid or expired token") from exc

        user_id = payload.get("user_id")
        role = payload.get("role")
        if not isinstance(user_id, int) or isinstance(user_id, bool) or not isinstance(role, str):
            raise InvalidToken("Invalid token claims")
        if payload.get("sub") != str(user_id):
            raise InvalidToken("Invalid token claims")

        return TokenClaims(
            user_id=user_id,
            role=role,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )


def get_credential_service() -> CredentialService:
    """The CredentialService bound to the current app."""
    return current_app.extensions["credentials"]
