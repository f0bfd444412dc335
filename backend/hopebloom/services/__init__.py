"""
Services Module

- users: registration, login, profile and superuser administration
"""
from . import users

__all__ = ["users"]
