import os

# Predictable configuration before the application modules are imported
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("TEST_USER_PHONE", "1234567890")
os.environ.setdefault("TEST_USER_OTP", "123456")

import pytest  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402
from fastapi import FastAPI  # noqa: E402

from storefront import models  # noqa: E402,F401
from storefront.api import deps  # noqa: E402
from storefront.api.v1.api import api_router  # noqa: E402
from storefront.core.config import settings  # noqa: E402
from storefront.core.exception_handlers import register_exception_handlers  # noqa: E402
from storefront.core.rate_limit import limiter  # noqa: E402
from storefront.core.security import SessionIssuer  # noqa: E402
from storefront.db.session import get_db  # noqa: E402
from storefront.services.fixtures import FixtureIdentity  # noqa: E402
from storefront.services.identity import IdentityService  # noqa: E402
from storefront.services.otp import OTPLedger  # noqa: E402
from tests.utils import FakeSmsSender  # noqa: E402

# Disable rate limiting globally for tests
limiter.enabled = False

@pytest.fixture
async def engine():
    # One shared in-memory database per test
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()

@pytest.fixture
async def session(engine):
    TestingSessionLocal = async_sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    async with TestingSessionLocal() as session:
        yield session

@pytest.fixture
def sms():
    return FakeSmsSender()

@pytest.fixture
def ledger(session, sms):
    return OTPLedger(session, sms, secret_key=settings.SECRET_KEY, ttl_minutes=settings.OTP_EXPIRY_MINUTES)

@pytest.fixture
def fixture_identity():
    return FixtureIdentity(phone="1234567890", fixed_code="123456")

@pytest.fixture
def identity(session, ledger, fixture_identity):
    return IdentityService(session, ledger, SessionIssuer.from_settings(settings), settings, fixture=fixture_identity)

@pytest.fixture
async def client(session, sms):
    # Create a fresh app for each test to avoid middleware/loop issues
    new_app = FastAPI()
    register_exception_handlers(new_app)
    new_app.include_router(api_router, prefix=settings.API_V1_STR)

    async def override_get_db():
        yield session

    new_app.dependency_overrides[get_db] = override_get_db
    new_app.dependency_overrides[deps.get_sms_sender] = lambda: sms

    async with AsyncClient(transport=ASGITransport(app=new_app), base_url="http://test") as c:
        yield c
