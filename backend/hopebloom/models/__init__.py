# hopebloom/models/__init__.py
"""
Database models module initialization.
Exports the Tortoise ORM models for convenient imports.
"""
from .user import User, Role, SELF_SERVICE_ROLES
