# hopebloom/api/v1/deps.py
from fastapi import Header
from hopebloom.core.errors import AuthenticationError, AuthorizationError
from hopebloom.core.security import Identity, TokenError, decode_access_token
from hopebloom.models.user import Role

NO_TOKEN = "No token, authorization denied"


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an "Authorization: Bearer xxx" header value."""
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    return authorization.split(" ", 1)[1].strip() or None


def resolve_identity(authorization: str | None, roles: tuple[Role, ...] = ()) -> Identity:
    """
    Gate a request on its Authorization header.

    Args:
        authorization: Raw Authorization header value (may be None)
        roles: Allowed roles; empty means any authenticated identity

    Returns:
        Identity: Verified {id, role} from the token

    Raises:
        AuthenticationError (401): No token, or the token is expired/invalid
        AuthorizationError (403): Role not in a non-empty allow-list
    """
    token = bearer_token(authorization)
    if not token:
        raise AuthenticationError(NO_TOKEN)

    try:
        identity = decode_access_token(token)
    except TokenError as exc:
        # "Token expired" vs "Token is not valid"
        raise AuthenticationError(str(exc))

    if roles and identity.role not in roles:
        raise AuthorizationError("Access denied")
    return identity


def require_roles(*roles: Role):
    """
    Build a FastAPI dependency that authenticates the request and, when roles
    are given, restricts it to them.

    Usage:
        @router.get("/admin")
        async def admin_only(identity: Identity = Depends(require_roles(Role.ADMIN))):
            ...
    """
    allowed = tuple(Role(r) for r in roles)

    async def dependency(
        authorization: str | None = Header(default=None),
    ) -> Identity:
        return resolve_identity(authorization, allowed)

    return dependency


# Any authenticated identity
get_current_identity = require_roles()
