import os
import uuid

# Must be in place before hopebloom.config builds its settings
TEST_DB_URL = "sqlite://:memory:"
os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ["JWT_SECRET"] = "test-secret"
os.environ["JWT_EXPIRES_IN"] = "7d"
os.environ["SUPERUSER_PASSWORD"] = ""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise, connections

from hopebloom.core import db as db_module
from hopebloom.core.security import create_access_token, hash_password
from hopebloom.main import app
from hopebloom.models.user import Role, User


db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await connections.close_all()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest_asyncio.fixture
async def db():
    """
    Fresh database without an HTTP client, for service-level tests.
    """
    await _init_test_db()
    yield
    await connections.close_all()


@pytest_asyncio.fixture
async def client(db):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest_asyncio.fixture
async def create_user(db):
    """
    Factory fixture to create users of any role directly via ORM.
    """

    async def _create_user(role: Role = Role.USER, password: str = "UserPass!23") -> tuple[User, str]:
        user = await User.create(
            username=f"{role.value}_{uuid.uuid4().hex[:6]}",
            password_hash=hash_password(password),
            role=role,
        )
        return user, password

    return _create_user


@pytest.fixture
def bearer():
    """
    Build Authorization headers for a user without going through /login.
    """

    def _bearer(user: User) -> dict[str, str]:
        token = create_access_token(str(user.id), user.role)
        return {"Authorization": f"Bearer {token}"}

    return _bearer


@pytest_asyncio.fixture
async def auth_header_factory(client):
    """
    Helper fixture to obtain Authorization headers via the login endpoint.
    """

    async def _get_headers(username: str, password: str) -> dict[str, str]:
        resp = await client.post(
            "/api/v1/auth/login",
            json={"username": username, "password": password},
        )
        assert resp.status_code == 200, resp.text
        token = resp.json()["token"]
        return {"Authorization": f"Bearer {token}"}

    return _get_headers
