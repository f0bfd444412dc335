# hopebloom/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: First-run superuser creation
- db: Database configuration and connection management
- errors: Service error taxonomy
- security: Password hashing and JWT token creation/validation
"""
