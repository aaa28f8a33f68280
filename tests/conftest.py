# Shared pytest configuration and fixtures for all test types
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from slowapi import Limiter
from slowapi.util import get_remote_address
from unittest.mock import patch
from datetime import datetime, timezone, timedelta

# Create test limiter with no limits and in-memory storage
test_limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],
    storage_uri="memory://",
    enabled=False,
)

# Patch the limiter before importing the app so decorators use test limiter
with patch("common.providers.rate_limiter.limiter.limiter", test_limiter):
    from api.main import app

from common.db.session import get_db, get_db_readonly
from common.db.base import Base
from packages.tenants.models.database.tenant import TenantEntity
from packages.billing.models.database.plan import PlanEntity
from packages.billing.models.database.subscription import SubscriptionEntity

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine and initialize schema."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_connection(test_engine):
    """Create test connection with outer transaction for rollback isolation."""
    async with test_engine.connect() as connection:
        trans = await connection.begin()
        yield connection
        await trans.rollback()


@pytest_asyncio.fixture(scope="function")
async def test_session_factory(test_connection):
    """Create session factory bound to test connection.

    Using join_transaction_mode="create_savepoint" so nested transaction()
    calls create savepoints instead of real nested transactions.
    """
    return async_sessionmaker(
        bind=test_connection,
        class_=AsyncSession,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )


@pytest_asyncio.fixture(scope="function")
async def test_db(test_session_factory):
    """Create a test database session."""
    async with test_session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function", autouse=True)
async def patch_lazy_sessions(test_session_factory, monkeypatch):
    """
    Patch session factories to use test database.

    This allows real transaction() and get_session() to run with proper
    commit/rollback/ContextVar semantics while using the test database.
    """
    monkeypatch.setattr("common.db.scoped.AsyncSessionLocal", test_session_factory)
    monkeypatch.setattr(
        "common.db.scoped.AsyncSessionLocalReadonly", test_session_factory
    )


@pytest_asyncio.fixture(scope="function")
async def client(test_db: AsyncSession):
    """Create a test client."""

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_db_readonly] = override_get_db

    try:
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def sample_tenant(test_db: AsyncSession):
    """Create a tenant with no Stripe customer yet."""
    tenant = TenantEntity(
        id="uid_alice",
        email="alice@example.com",
        full_name="Alice Example",
    )
    test_db.add(tenant)
    await test_db.commit()
    await test_db.refresh(tenant)
    return tenant


@pytest_asyncio.fixture(scope="function")
async def billable_tenant(test_db: AsyncSession):
    """Create a tenant already linked to a Stripe customer."""
    tenant = TenantEntity(
        id="uid_bob",
        email="bob@example.com",
        full_name="Bob Example",
        stripe_customer_id="cus_bob",
    )
    test_db.add(tenant)
    await test_db.commit()
    await test_db.refresh(tenant)
    return tenant


@pytest_asyncio.fixture(scope="function")
async def sample_plan(test_db: AsyncSession):
    """Create a base plan with monthly and yearly prices and a trial."""
    plan = PlanEntity(
        id="pro",
        name="Pro",
        description="For growing teams",
        price_monthly=29.0,
        price_yearly=290.0,
        features=["5 instances", "Email support"],
        is_trial=True,
        trial_days=14,
        is_active=True,
        is_addon=False,
        monthly_price_id="price_pro_monthly",
        yearly_price_id="price_pro_yearly",
    )
    test_db.add(plan)
    await test_db.commit()
    await test_db.refresh(plan)
    return plan


@pytest_asyncio.fixture(scope="function")
async def addon_plan(test_db: AsyncSession):
    """Create an add-on plan."""
    plan = PlanEntity(
        id="extra-instance",
        name="Extra Instance",
        price_monthly=10.0,
        price_yearly=100.0,
        features=["1 additional instance"],
        is_active=True,
        is_addon=True,
        monthly_price_id="price_addon_monthly",
    )
    test_db.add(plan)
    await test_db.commit()
    await test_db.refresh(plan)
    return plan


@pytest_asyncio.fixture(scope="function")
async def free_plan(test_db: AsyncSession):
    """Create a free plan without Stripe prices."""
    plan = PlanEntity(
        id="free",
        name="Free",
        price_monthly=0,
        price_yearly=0,
        features=["1 instance"],
        is_active=True,
    )
    test_db.add(plan)
    await test_db.commit()
    await test_db.refresh(plan)
    return plan


@pytest_asyncio.fixture(scope="function")
async def sample_subscription(test_db: AsyncSession, billable_tenant, sample_plan):
    """Create an active subscription projection for the billable tenant."""
    now = datetime.now(timezone.utc)
    subscription = SubscriptionEntity(
        id="sub_bob",
        tenant_id=billable_tenant.id,
        status="active",
        plan_id=sample_plan.id,
        price_ids=["price_pro_monthly"],
        items=[{"id": "si_base", "price_id": "price_pro_monthly", "quantity": 1}],
        current_period_end=now + timedelta(days=30),
        created=now - timedelta(days=1),
        cancel_at_period_end=False,
        stripe_customer_id="cus_bob",
        created_at=now,
        updated_at=now,
    )
    test_db.add(subscription)
    await test_db.commit()
    await test_db.refresh(subscription)
    return subscription
