"""
User service: registration, login, profile and superuser administration.

Routers call these functions with plain request data and the verified
identity; every expected failure is raised as a ServiceError subclass and
anything unexpected is logged and re-raised as a generic InternalError.
"""
import logging
import uuid
from typing import Any, Mapping

from tortoise.exceptions import IntegrityError

from hopebloom.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InternalError,
    NotFoundError,
    ServiceError,
    ValidationError,
)
from hopebloom.core.security import (
    Identity,
    create_access_token,
    hash_password,
    verify_password,
)
from hopebloom.models.user import SELF_SERVICE_ROLES, Role, User

logger = logging.getLogger("uvicorn.error")

USERNAME_MIN, USERNAME_MAX = 3, 64
PASSWORD_MIN, PASSWORD_MAX = 6, 128

DUPLICATE_USERNAME = "Username already registered"
INVALID_CREDENTIALS = "Invalid username or password"
ACCESS_DENIED = "Access denied"
USER_NOT_FOUND = "User not found"

PROFILE_FIELDS = (
    ("name", "name"),
    ("phone", "phone"),
    ("specialization", "specialization"),
    ("licenseNumber", "license_number"),
)


# ===== Projections =====
def normalize_username(username: str) -> str:
    return (username or "").strip().lower()


def public_user(u: User) -> dict:
    """User view without the password hash."""
    return {
        "id": str(u.id),
        "username": u.username,
        "role": Role(u.role).value,
        "name": u.name,
        "phone": u.phone,
        "specialization": u.specialization,
        "licenseNumber": u.license_number,
        "createdAt": u.created_at.isoformat() if u.created_at else None,
        "updatedAt": u.updated_at.isoformat() if u.updated_at else None,
    }


def identity_user(u: User) -> dict:
    return {"id": str(u.id), "username": u.username, "role": Role(u.role).value}


def _clean_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _parse_user_id(raw: Any) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(raw))
    except (TypeError, ValueError):
        return None


# ===== Validation =====
def validate_register(data: Mapping[str, Any]) -> list[str]:
    """Return every validation message for a sign-up body, in field order."""
    username = data.get("username")
    password = data.get("password")
    role = data.get("role")
    errors: list[str] = []

    if not username or not isinstance(username, str):
        errors.append("Username is required")
    else:
        trimmed = username.strip()
        if len(trimmed) < USERNAME_MIN:
            errors.append(f"Username must be at least {USERNAME_MIN} characters")
        if len(trimmed) > USERNAME_MAX:
            errors.append(f"Username must be at most {USERNAME_MAX} characters")

    if not password or not isinstance(password, str):
        errors.append("Password is required")
    else:
        if len(password) < PASSWORD_MIN:
            errors.append(f"Password must be at least {PASSWORD_MIN} characters")
        if len(password) > PASSWORD_MAX:
            errors.append(f"Password must be at most {PASSWORD_MAX} characters")

    if role is not None and role != "":
        allowed = [r.value for r in SELF_SERVICE_ROLES]
        if str(role).strip().lower() not in allowed:
            errors.append(f"Role must be one of: {', '.join(allowed)}")

    return errors


def validate_login(data: Mapping[str, Any]) -> list[str]:
    username = data.get("username")
    password = data.get("password")
    errors: list[str] = []
    if not isinstance(username, str) or not username.strip():
        errors.append("Username is required")
    if not isinstance(password, str) or not password:
        errors.append("Password is required")
    return errors


def _raise_if_invalid(errors: list[str]) -> None:
    if errors:
        raise ValidationError(errors[0], errors)


def _self_service_role(raw: Any) -> Role:
    if raw is None or raw == "":
        return Role.USER
    try:
        role = Role(str(raw).strip().lower())
    except ValueError:
        return Role.USER
    return role if role in SELF_SERVICE_ROLES else Role.USER


def _require_superuser(actor: Identity) -> None:
    if actor.role is not Role.SUPERUSER:
        raise AuthorizationError(ACCESS_DENIED)


# ===== Operations =====
async def register(data: Mapping[str, Any]) -> dict:
    """
    Create a user and sign them in.

    The existence check is only a fast path; the unique constraint on
    users.username decides concurrent registrations, and both paths produce
    the same message.

    Returns:
        dict: {"token": str, "user": public projection}

    Raises:
        ValidationError: Invalid input (first message + full list)
        ConflictError: Username already registered
        InternalError: Store or hashing failure
    """
    _raise_if_invalid(validate_register(data))

    username = normalize_username(data["username"])
    role = _self_service_role(data.get("role"))
    try:
        if await User.exists(username=username):
            raise ConflictError(DUPLICATE_USERNAME)

        profile = {attr: _clean_text(data.get(key)) for key, attr in PROFILE_FIELDS}
        try:
            user = await User.create(
                username=username,
                password_hash=hash_password(data["password"]),
                role=role,
                **profile,
            )
        except IntegrityError:
            logger.info("[users] duplicate username rejected by store: %s", username)
            raise ConflictError(DUPLICATE_USERNAME)

        token = create_access_token(str(user.id), user.role)
    except ServiceError:
        raise
    except Exception:
        logger.exception("[users] register failed")
        raise InternalError("Registration failed. Please try again.")

    return {"token": token, "user": public_user(user)}


async def login(data: Mapping[str, Any]) -> dict:
    """
    Verify credentials and issue a token.

    Unknown username and wrong password raise the same AuthenticationError so
    callers cannot tell which one happened.
    """
    _raise_if_invalid(validate_login(data))

    username = normalize_username(data["username"])
    try:
        user = await User.get_or_none(username=username)
        if not user or not verify_password(data["password"], user.password_hash):
            raise AuthenticationError(INVALID_CREDENTIALS)
        token = create_access_token(str(user.id), user.role)
    except ServiceError:
        raise
    except Exception:
        logger.exception("[users] login failed")
        raise InternalError("Login failed. Please try again.")

    return {"token": token, "user": identity_user(user)}


async def get_profile(identity: Identity) -> dict:
    """Load the caller's own record; 404 if it vanished since the token was issued."""
    user_id = _parse_user_id(identity.id)
    if user_id is None:
        raise NotFoundError(USER_NOT_FOUND)
    try:
        user = await User.get_or_none(id=user_id)
    except Exception:
        logger.exception("[users] profile lookup failed")
        raise InternalError("Failed to load profile")
    if not user:
        raise NotFoundError(USER_NOT_FOUND)
    return public_user(user)


async def assign_admin_role(actor: Identity, target_user_id: Any) -> dict:
    """
    Promote a user to admin (superuser only).

    Idempotent: promoting an existing admin saves the same role again and
    succeeds. Superusers cannot be demoted through this call.
    """
    _require_superuser(actor)
    if target_user_id is None or not str(target_user_id).strip():
        raise ValidationError("Target user id is required")

    user_id = _parse_user_id(str(target_user_id).strip())
    if user_id is None:
        raise NotFoundError(USER_NOT_FOUND)
    try:
        user = await User.get_or_none(id=user_id)
        if not user:
            raise NotFoundError(USER_NOT_FOUND)
        if user.role == Role.SUPERUSER:
            raise ValidationError("Cannot change the role of a superuser")
        user.role = Role.ADMIN
        await user.save()
    except ServiceError:
        raise
    except Exception:
        logger.exception("[users] assign admin failed for %s", user_id)
        raise InternalError("Failed to assign admin role. Please try again.")

    logger.info("[users] %s promoted %s to admin", actor.id, user.id)
    return public_user(user)


async def list_users(actor: Identity) -> list[dict]:
    """All users, newest first, without password hashes (superuser only)."""
    _require_superuser(actor)
    try:
        rows = await User.all().order_by("-created_at")
    except Exception:
        logger.exception("[users] list users failed")
        raise InternalError("Failed to load users")
    return [public_user(u) for u in rows]
