import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from booking_admin.main import app
from booking_admin.db.session import get_db
from booking_admin.models import Base, User, Zone, VehicleBasePrice, ZoneMultiplier, FixedRoute
from booking_admin.core.security import create_access_token, hash_password, JWT_ALGORITHM
from booking_admin.core.config import settings
from booking_admin.core.enums import UserRole
from booking_admin.services.cache_refresh import get_cache_refresher
from booking_admin.services.estimators import (
    ConstantZoneLookup,
    FixedDistanceEstimator,
    get_distance_estimator,
    get_zone_lookup,
)


TEST_DISTANCE_KM = 20
TEST_ZONE_MULTIPLIER = "1.2"


class RecordingCacheRefresher:
    """Cache refresher double that counts signals and can be told to fail."""

    def __init__(self, succeed: bool = True, raise_error: bool = False):
        self.succeed = succeed
        self.raise_error = raise_error
        self.calls = 0

    async def refresh(self) -> bool:
        self.calls += 1
        if self.raise_error:
            raise RuntimeError("refresh endpoint unreachable")
        return self.succeed


@pytest.fixture
async def test_engine(tmp_path):
    url = os.getenv("TEST_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    engine = create_async_engine(url, poolclass=NullPool, future=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def fetch_all(session_factory):
    """Read rows through a fresh session so nothing comes from a stale identity map."""
    async def _fetch_all(model, *criteria, order_by=None):
        async with session_factory() as session:
            q = select(model).where(*criteria)
            if order_by is not None:
                q = q.order_by(order_by)
            res = await session.execute(q)
            return res.scalars().all()

    return _fetch_all


@pytest.fixture
def cache_refresher():
    return RecordingCacheRefresher()


@pytest.fixture
async def test_client(session_factory, cache_refresher):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_distance_estimator] = lambda: FixedDistanceEstimator(TEST_DISTANCE_KM)
    app.dependency_overrides[get_zone_lookup] = lambda: ConstantZoneLookup(TEST_ZONE_MULTIPLIER)
    app.dependency_overrides[get_cache_refresher] = lambda: cache_refresher

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def _create_user(session_factory, email: str, role: UserRole, password: str = "secret-pass") -> User:
    async with session_factory() as session:
        user = User(email=email, password_hash=hash_password(password), role=role)
        session.add(user)
        await session.commit()
        return user


@pytest.fixture
async def admin_user(session_factory):
    return await _create_user(session_factory, "admin@example.com", UserRole.ADMIN, "admin-pass")


@pytest.fixture
async def partner_user(session_factory):
    return await _create_user(session_factory, "partner@example.com", UserRole.PARTNER)


@pytest.fixture
async def support_user(session_factory):
    return await _create_user(session_factory, "support@example.com", UserRole.SUPPORT)


@pytest.fixture
async def customer_user(session_factory):
    return await _create_user(session_factory, "customer@example.com", UserRole.CUSTOMER)


@pytest.fixture
def admin_token(admin_user):
    return create_access_token(admin_user.id, UserRole.ADMIN)


@pytest.fixture
def partner_token(partner_user):
    return create_access_token(partner_user.id, UserRole.PARTNER)


@pytest.fixture
def support_token(support_user):
    return create_access_token(support_user.id, UserRole.SUPPORT)


@pytest.fixture
def customer_token(customer_user):
    return create_access_token(customer_user.id, UserRole.CUSTOMER)


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def expired_token(admin_user):
    from jose import jwt

    payload = {
        "sub": admin_user.id,
        "role": UserRole.ADMIN.value,
        "exp": datetime.now(timezone.utc) - timedelta(hours=1)  # Expired 1 hour ago
    }

    return jwt.encode(
        payload,
        settings.SECRET_KEY,
        algorithm=JWT_ALGORITHM
    )


@pytest.fixture
async def pricing_seed(session_factory):
    """Sedan/SUV base rates, one zone with a multiplier and one fixed route."""
    async with session_factory() as session:
        zone = Zone(name="Airport")
        other_zone = Zone(name="Old Town")
        sedan = VehicleBasePrice(vehicle_type="sedan", base_price_per_km=Decimal("2.00"))
        suv = VehicleBasePrice(vehicle_type="suv", base_price_per_km=Decimal("3.50"))
        session.add_all([zone, other_zone, sedan, suv])
        await session.flush()

        multiplier = ZoneMultiplier(zone_id=zone.id, multiplier=Decimal("1.500"))
        route = FixedRoute(
            origin_name="Airport",
            destination_name="City Center",
            vehicle_type="sedan",
            fixed_price=Decimal("45.00"),
        )
        session.add_all([multiplier, route])
        await session.commit()

        return {
            "zone_id": zone.id,
            "other_zone_id": other_zone.id,
            "sedan_id": sedan.id,
            "suv_id": suv.id,
            "multiplier_id": multiplier.id,
            "route_id": route.id,
        }


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "auth: marks tests related to authentication"
    )
    config.addinivalue_line(
        "markers", "pricing: marks tests related to pricing"
    )
    config.addinivalue_line(
        "markers", "audit: marks tests related to audit logging"
    )
