# hopebloom/models/user.py
"""
Database model for users.
Represents a user account: credentials, profile fields and role.
"""
import uuid
from enum import Enum
from tortoise import fields, models


class Role(str, Enum):
    """Closed set of roles. Access checks are plain allow-lists over these."""
    USER = "user"
    DOCTOR = "doctor"
    ADMIN = "admin"
    SUPERUSER = "superuser"


# Roles a user may pick for themselves at registration
SELF_SERVICE_ROLES = (Role.USER, Role.DOCTOR)


class User(models.Model):
    """
    User database model.

    Security:
    - Password is stored as an argon2 hash (never plain text)
    - Username is unique at the database level, stored trimmed and lowercase
    - Only a superuser may promote another user to admin
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)  # Primary key: unique user identifier
    username = fields.CharField(
        max_length=64,
        unique=True,
        index=True,
    )  # Login name (normalized, unique constraint is the authoritative duplicate guard)
    password_hash = fields.CharField(max_length=255)  # Never included in public projections
    role = fields.CharEnumField(Role, max_length=16, default=Role.USER)
    name = fields.TextField(default="")
    phone = fields.TextField(default="")
    specialization = fields.TextField(default="")
    license_number = fields.TextField(default="")  # "licenseNumber" on the wire
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"

    def __str__(self) -> str:
        return self.username
