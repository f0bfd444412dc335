# hopebloom/core/bootstrap.py
"""
Bootstrap module for application initialization.
Creates the first superuser, the only role allowed to grant admin.
"""
import logging
from hopebloom.config import settings
from hopebloom.core.security import hash_password
from hopebloom.models.user import Role, User

logger = logging.getLogger("uvicorn.error")


async def ensure_default_superuser() -> User | None:
    """
    If no superuser exists, create one from environment variables.
    Only takes effect under the following conditions:
      - Currently no user with role="superuser"
      - And SUPERUSER_PASSWORD is set (to avoid a default weak password)
    Environment variables:
      SUPERUSER_USERNAME (default: "superuser")
      SUPERUSER_PASSWORD (required, otherwise won't create)

    Returns:
        The created user, or None when nothing was created
    """
    if await User.filter(role=Role.SUPERUSER).exists():
        return None

    password = settings.superuser_password
    if not password:
        logger.warning("[bootstrap] No superuser present, but SUPERUSER_PASSWORD not set -> skip creating one.")
        return None

    # If the name is already taken by a regular account, append a number suffix
    base_username = (settings.superuser_username or "superuser").strip().lower()
    username = base_username
    suffix = 1
    while await User.filter(username=username).exists():
        suffix += 1
        username = f"{base_username}{suffix}"

    u = await User.create(
        username=username,
        password_hash=hash_password(password),
        role=Role.SUPERUSER,
    )
    logger.warning("[bootstrap] Created default superuser -> username=%s id=%s", u.username, u.id)
    return u
