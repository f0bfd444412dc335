# hopebloom/core/security.py
"""
Security module for authentication and authorization.
Handles password hashing, JWT token creation/validation, and the role set.
"""
import datetime as dt
from dataclasses import dataclass

import jwt  # PyJWT
from passlib.context import CryptContext
from passlib.exc import PasswordSizeError

from hopebloom.config import ConfigError, settings
from hopebloom.models.user import Role

# Password hashing context
# Argon2 is a memory-hard, salted hash; cost parameters are passlib's defaults
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",   # Automatically handle deprecated schemes
)

JWT_ALG = "HS256"  # JWT signing algorithm (HMAC SHA-256)


class TokenError(Exception):
    """Base class for token verification failures."""


class TokenExpiredError(TokenError):
    pass


class TokenInvalidError(TokenError):
    pass


@dataclass(frozen=True)
class Identity:
    """Verified identity carried by an access token."""
    id: str
    role: Role

    def to_dict(self) -> dict:
        return {"id": self.id, "role": self.role.value}


def _secret() -> str:
    if not settings.jwt_secret:
        raise ConfigError("Missing JWT_SECRET in environment. Set it in .env")
    return settings.jwt_secret


def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Args:
        plain: Plain text password to hash

    Returns:
        Hashed password string (safe to store in database)
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """
    Verify a plain text password against a hashed password.

    Returns:
        True if password matches, False otherwise
        (a password longer than passlib accepts never matches)

    Raises:
        ValueError: If the stored hash is malformed or of an unknown scheme
    """
    try:
        return pwd_context.verify(plain, hashed)
    except PasswordSizeError:
        return False


def create_access_token(user_id: str, role: Role | str, ttl: dt.timedelta | None = None) -> str:
    """
    Create a JWT access token for user authentication.

    The token carries only the user id and role so the API layer can
    authorize without a database lookup.

    Args:
        user_id: Unique user identifier (UUID string)
        role: User role
        ttl: Token lifetime (defaults to JWT_EXPIRES_IN, 7 days)

    Token payload:
        - id: user ID
        - role: user role for authorization
        - exp: expiration timestamp
    """
    if ttl is None:
        ttl = settings.token_ttl
    payload = {
        "id": str(user_id),
        "role": Role(role).value,
        "exp": dt.datetime.now(dt.timezone.utc) + ttl,
    }
    return jwt.encode(payload, _secret(), algorithm=JWT_ALG)


def decode_access_token(token: str) -> Identity:
    """
    Decode and validate a JWT access token.

    Raises:
        TokenExpiredError: If the token has expired
        TokenInvalidError: If the token is malformed, tampered with, or its
            claims are missing or unknown
    """
    try:
        payload = jwt.decode(
            token,
            _secret(),
            algorithms=[JWT_ALG],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpiredError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise TokenInvalidError("Token is not valid") from exc

    user_id = payload.get("id")
    try:
        role = Role(payload.get("role"))
    except ValueError as exc:
        raise TokenInvalidError("Token is not valid") from exc
    if not user_id or not isinstance(user_id, str):
        raise TokenInvalidError("Token is not valid")
    return Identity(id=user_id, role=role)
