# pulsechat/tests/conftest.py
from datetime import UTC, datetime, timedelta

import jwt
import pytest
from fakeredis import aioredis
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from pulsechat.config import AppConfig
from pulsechat.infrastructure.database import Base, create_database
from pulsechat.infrastructure.uow import UnitOfWork
from pulsechat.main import Application

TEST_JWT_KEY = "test_identity_secret_key_with_enough_bytes"
TEST_ISSUER = "https://identity.test"


@pytest.fixture(scope="function")
def app_config():
    """Test configuration: in-memory SQLite and HS256-signed identity tokens."""
    return AppConfig(
        DATABASE_URL="sqlite+aiosqlite://",
        REDIS_HOST="localhost",
        REDIS_PORT=6379,
        IDENTITY_JWT_KEY=TEST_JWT_KEY,
        IDENTITY_JWT_ALGORITHM="HS256",
        PROJECT_NAME="Test PulseChat API",
        PROJECT_VERSION="1.0.0",
        PROJECT_DESCRIPTION="Test PulseChat API",
        API_V1_STR="/api/v1",
    )


@pytest.fixture(scope="function")
async def mock_redis():
    """Provide a fake Redis client for testing."""
    redis = aioredis.FakeRedis(decode_responses=True)
    yield redis
    await redis.flushall()
    await redis.aclose()


@pytest.fixture(scope="function")
async def engine(app_config):
    """In-memory SQLite shared by every session through a single connection."""
    engine = create_async_engine(
        app_config.DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    async with engine.begin() as conn:
        from pulsechat.infrastructure import models  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(engine):
    """Provide a SQLAlchemy session for gateway tests."""
    session_factory = async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False
    )
    session = session_factory()
    yield session
    await session.close()


@pytest.fixture(scope="function")
async def uow():
    """Provide a UnitOfWork instance for testing."""
    return UnitOfWork()


@pytest.fixture(scope="function")
async def application(app_config, mock_redis, engine):
    application = Application(config=app_config)
    application.database = create_database(engine)
    application.redis_client.client = mock_redis
    return application


@pytest.fixture(scope="function")
async def app(application):
    """Create the FastAPI app on the test database."""
    return application.create_app()


@pytest.fixture(scope="function")
async def client(app):
    """Provide an HTTP client with the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


def make_token(subject: str, name: str | None = None, expires_in: int = 300, **claims):
    payload = {
        "sub": subject,
        "iss": TEST_ISSUER,
        "exp": datetime.now(UTC) + timedelta(seconds=expires_in),
        **claims,
    }
    if name is not None:
        payload["name"] = name
        payload.setdefault("email", f"{name.lower()}@example.com")
    return jwt.encode(payload, TEST_JWT_KEY, algorithm="HS256")


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def token_factory():
    """Mint identity tokens the way the identity provider would."""
    return make_token


@pytest.fixture
def auth_headers():
    return bearer


async def _signed_in(client: AsyncClient, subject: str, name: str) -> dict:
    headers = bearer(make_token(subject, name))
    response = await client.post("/api/v1/users/me", headers=headers)
    assert response.status_code == 200, f"Sign-in failed: {response.json()}"
    return {"headers": headers, "user": response.json()}


@pytest.fixture(scope="function")
async def alice(client):
    return await _signed_in(client, "alice-sub", "Alice")


@pytest.fixture(scope="function")
async def bob(client):
    return await _signed_in(client, "bob-sub", "Bob")


@pytest.fixture(scope="function")
async def carol(client):
    return await _signed_in(client, "carol-sub", "Carol")


@pytest.fixture(scope="function")
async def dm(client, alice, bob):
    """Direct conversation between alice and bob."""
    response = await client.post(
        "/api/v1/conversations/direct",
        headers=alice["headers"],
        json={"other_user_id": bob["user"]["id"]},
    )
    assert response.status_code == 200
    return response.json()["conversation_id"]
