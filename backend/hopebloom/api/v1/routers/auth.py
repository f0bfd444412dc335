# hopebloom/api/v1/routers/auth.py
from fastapi import APIRouter, Depends, status

from hopebloom.api.v1.deps import get_current_identity, require_roles
from hopebloom.core.security import Identity
from hopebloom.models.user import Role
from hopebloom.schemas.auth import AssignAdminIn, LoginIn, RegisterIn
from hopebloom.services import users

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterIn | None = None):
    """
    Register a new user account and return a token for it.

    Body fields: username, password, role ("user" or "doctor"), and optional
    name, phone, specialization, licenseNumber.

    Returns:
        201: {success, message, token, user}

    Errors:
        400: Validation failure ({message, errors}) or "Username already registered"
        500: "Registration failed. Please try again."
    """
    result = await users.register(body.model_dump() if body else {})
    return {"success": True, "message": "User registered successfully", **result}


@router.post("/login")
async def login(body: LoginIn | None = None):
    """
    Authenticate with username and password.

    Returns:
        200: {success, message, token, user: {id, username, role}}

    Errors:
        400: Missing username or password
        401: "Invalid username or password" (same for unknown user and wrong password)
    """
    result = await users.login(body.model_dump() if body else {})
    return {"success": True, "message": "Login successful", **result}


@router.get("/profile")
async def profile(identity: Identity = Depends(get_current_identity)):
    """
    Get the profile of the authenticated user (any role).

    Errors:
        401: Missing, invalid or expired token
        404: The account no longer exists
    """
    user = await users.get_profile(identity)
    return {"success": True, "message": "Welcome to your profile", "user": user}


@router.get("/admin")
async def admin(identity: Identity = Depends(require_roles(Role.ADMIN))):
    """Admin-only probe; echoes the identity from the token."""
    return {"success": True, "message": "Admin access granted", "user": identity.to_dict()}


@router.post("/assign-admin")
async def assign_admin(
    body: AssignAdminIn,
    identity: Identity = Depends(require_roles(Role.SUPERUSER)),
):
    """
    Promote a user to admin (superuser only). Calling it again for the same
    user succeeds and leaves the role as admin.

    Errors:
        400: Missing targetUserId, or the target is a superuser
        401/403: Not authenticated / not a superuser
        404: Target user not found
    """
    user = await users.assign_admin_role(identity, body.target_user_id)
    return {"success": True, "message": "Admin role assigned", "user": user}


@router.get("/users")
async def list_users(identity: Identity = Depends(require_roles(Role.SUPERUSER))):
    """List every user without password hashes (superuser only)."""
    rows = await users.list_users(identity)
    return {"success": True, "message": "Users retrieved", "users": rows}
