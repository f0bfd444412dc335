"""
Unit tests for services.users against an in-memory database.
"""
import uuid
from unittest.mock import AsyncMock, patch

import pytest

from hopebloom.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from hopebloom.core.security import Identity, decode_access_token
from hopebloom.models.user import Role, User
from hopebloom.services import users


pytestmark = pytest.mark.asyncio


def _actor(user: User) -> Identity:
    return Identity(id=str(user.id), role=Role(user.role))


class TestRegister:

    async def test_token_matches_persisted_record(self, db):
        result = await users.register({"username": "drsmith", "password": "secret1", "role": "doctor"})
        stored = await User.get(username="drsmith")
        identity = decode_access_token(result["token"])
        assert identity.id == str(stored.id)
        assert identity.role is Role.DOCTOR
        assert stored.role == Role.DOCTOR
        assert "password_hash" not in result["user"]
        assert "password" not in result["user"]

    async def test_password_is_stored_hashed(self, db):
        await users.register({"username": "bob", "password": "secret1"})
        stored = await User.get(username="bob")
        assert stored.password_hash != "secret1"
        assert stored.role == Role.USER

    async def test_profile_fields_are_trimmed(self, db):
        result = await users.register({
            "username": "drwho",
            "password": "secret1",
            "role": "doctor",
            "name": "  Dr Who ",
            "licenseNumber": " L-42 ",
        })
        assert result["user"]["name"] == "Dr Who"
        assert result["user"]["licenseNumber"] == "L-42"
        assert result["user"]["phone"] == ""

    async def test_validation_error_carries_all_messages(self, db):
        with pytest.raises(ValidationError) as excinfo:
            await users.register({"username": "ab", "password": "123"})
        assert excinfo.value.message == "Username must be at least 3 characters"
        assert excinfo.value.errors == [
            "Username must be at least 3 characters",
            "Password must be at least 6 characters",
        ]

    async def test_store_constraint_catches_race(self, db):
        """If the pre-check misses a concurrent insert, the unique constraint still wins."""
        await users.register({"username": "bob", "password": "secret1"})
        with patch.object(User, "exists", AsyncMock(return_value=False)):
            with pytest.raises(ConflictError) as excinfo:
                await users.register({"username": "  BOB ", "password": "secret2"})
        assert excinfo.value.message == "Username already registered"
        assert await User.filter(username="bob").count() == 1

    async def test_unexpected_failure_is_generic(self, db):
        with patch("hopebloom.services.users.hash_password", side_effect=RuntimeError("boom")):
            with pytest.raises(InternalError) as excinfo:
                await users.register({"username": "bob", "password": "secret1"})
        assert excinfo.value.message == "Registration failed. Please try again."
        assert "boom" not in excinfo.value.message


class TestLogin:

    async def test_same_message_for_unknown_user_and_wrong_password(self, db):
        await users.register({"username": "bob", "password": "secret1"})
        with pytest.raises(AuthenticationError) as wrong_password:
            await users.login({"username": "bob", "password": "secret2"})
        with pytest.raises(AuthenticationError) as unknown_user:
            await users.login({"username": "alice", "password": "secret1"})
        assert wrong_password.value.message == unknown_user.value.message == "Invalid username or password"

    async def test_login_normalizes_username(self, db):
        await users.register({"username": "bob", "password": "secret1"})
        result = await users.login({"username": "  Bob ", "password": "secret1"})
        assert result["user"]["username"] == "bob"
        assert set(result["user"]) == {"id", "username", "role"}

    async def test_malformed_stored_hash_is_internal_error(self, db):
        await User.create(username="broken", password_hash="not-a-hash")
        with pytest.raises(InternalError, match="Login failed. Please try again."):
            await users.login({"username": "broken", "password": "secret1"})


class TestProfile:

    async def test_vanished_user_is_not_found(self, db):
        with pytest.raises(NotFoundError):
            await users.get_profile(Identity(id=str(uuid.uuid4()), role=Role.USER))

    async def test_non_uuid_id_is_not_found(self, db):
        with pytest.raises(NotFoundError):
            await users.get_profile(Identity(id="not-a-uuid", role=Role.USER))


class TestAssignAdminRole:

    async def test_requires_superuser(self, create_user):
        admin, _ = await create_user(Role.ADMIN)
        target, _ = await create_user()
        with pytest.raises(AuthorizationError):
            await users.assign_admin_role(_actor(admin), str(target.id))

    @pytest.mark.parametrize("target_id", [None, "", "   "])
    async def test_target_required(self, create_user, target_id):
        su, _ = await create_user(Role.SUPERUSER)
        with pytest.raises(ValidationError, match="Target user id is required"):
            await users.assign_admin_role(_actor(su), target_id)

    async def test_unknown_target(self, create_user):
        su, _ = await create_user(Role.SUPERUSER)
        with pytest.raises(NotFoundError):
            await users.assign_admin_role(_actor(su), str(uuid.uuid4()))
        with pytest.raises(NotFoundError):
            await users.assign_admin_role(_actor(su), "nope")

    async def test_promotion_is_idempotent(self, create_user):
        su, _ = await create_user(Role.SUPERUSER)
        target, _ = await create_user(Role.DOCTOR)
        first = await users.assign_admin_role(_actor(su), str(target.id))
        second = await users.assign_admin_role(_actor(su), str(target.id))
        assert first["role"] == second["role"] == "admin"
        await target.refresh_from_db()
        assert target.role == Role.ADMIN

    async def test_superuser_cannot_be_demoted(self, create_user):
        su, _ = await create_user(Role.SUPERUSER)
        with pytest.raises(ValidationError, match="Cannot change the role of a superuser"):
            await users.assign_admin_role(_actor(su), str(su.id))


class TestListUsers:

    async def test_requires_superuser(self, create_user):
        doctor, _ = await create_user(Role.DOCTOR)
        with pytest.raises(AuthorizationError):
            await users.list_users(_actor(doctor))

    async def test_excludes_password_hash(self, create_user):
        su, _ = await create_user(Role.SUPERUSER)
        await create_user()
        rows = await users.list_users(_actor(su))
        assert len(rows) == 2
        assert all("password_hash" not in row for row in rows)
