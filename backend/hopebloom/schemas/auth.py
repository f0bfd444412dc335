# hopebloom/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.

Field types are deliberately loose: type and length checks live in the user
service so every failure comes back with the same message format instead of
pydantic's.
"""
from typing import Any
from pydantic import BaseModel, Field


class RegisterIn(BaseModel):
    """Request body for sign-up."""
    username: Any = None
    password: Any = None
    role: Any = None  # "user" or "doctor"; anything else is rejected
    name: Any = None
    phone: Any = None
    specialization: Any = None
    licenseNumber: Any = None


class LoginIn(BaseModel):
    """Request body for login."""
    username: Any = None
    password: Any = None


class AssignAdminIn(BaseModel):
    """Request body for promoting a user to admin (superuser only)."""
    target_user_id: Any = Field(default=None, alias="targetUserId")

    model_config = {"populate_by_name": True}
