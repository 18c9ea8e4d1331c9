import os

# Settings are read at import time; configure before importing the app
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ.pop("BOOTSTRAP_ADMIN_EMAIL", None)

import uuid  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from coachdesk.core.security import create_access_token  # noqa: E402
from coachdesk.database import Base, get_db  # noqa: E402
from coachdesk.main import app  # noqa: E402
from coachdesk.models.campaign import Campaign, CampaignKpi, Kpi  # noqa: E402
from coachdesk.models.user import Role, User  # noqa: E402
from coachdesk.utils.password import hash_password  # noqa: E402

DEFAULT_PASSWORD = "correct-horse-battery"


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'coachdesk.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest.fixture
def make_user(db_session):
    async def _make_user(role: Role = Role.AGENT, **kwargs) -> User:
        user = User(
            email=kwargs.pop("email", f"user-{uuid.uuid4().hex[:10]}@example.com"),
            full_name=kwargs.pop("full_name", f"Test {role.value}"),
            hashed_password=hash_password(kwargs.pop("password", DEFAULT_PASSWORD)),
            role=role.value,
            is_active=kwargs.pop("is_active", True),
            **kwargs,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make_user


@pytest_asyncio.fixture
async def campaign(db_session):
    campaign = Campaign(name="Billing Support", description="Inbound billing queue")
    db_session.add(campaign)
    await db_session.commit()
    await db_session.refresh(campaign)
    return campaign


@pytest_asyncio.fixture
async def kpis(db_session, campaign):
    """Four KPIs; all but AHT are enabled for the campaign."""
    csat = Kpi(name="CSAT", kpi_type="Percentage")
    quality = Kpi(name="Quality", kpi_type="Rating1to5")
    revenue = Kpi(name="Upsell Revenue", kpi_type="Currency")
    aht = Kpi(name="AHT", kpi_type="Time")
    db_session.add_all([csat, quality, revenue, aht])
    await db_session.commit()

    db_session.add_all([
        CampaignKpi(campaign_id=campaign.id, kpi_id=csat.id, enabled=True),
        CampaignKpi(campaign_id=campaign.id, kpi_id=quality.id, enabled=True),
        CampaignKpi(campaign_id=campaign.id, kpi_id=revenue.id, enabled=True),
        CampaignKpi(campaign_id=campaign.id, kpi_id=aht.id, enabled=False),
    ])
    await db_session.commit()
    return {"csat": csat, "quality": quality, "revenue": revenue, "aht": aht}


@pytest_asyncio.fixture
async def super_admin(make_user):
    return await make_user(Role.SUPER_ADMIN, full_name="Sam Root")


@pytest_asyncio.fixture
async def admin(make_user):
    return await make_user(Role.ADMIN, full_name="Ada Admin")


@pytest_asyncio.fixture
async def manager(make_user):
    return await make_user(Role.MANAGER, full_name="Morgan Lead")


@pytest_asyncio.fixture
async def agent(make_user, manager, campaign):
    return await make_user(
        Role.AGENT, full_name="Alex Agent", manager_id=manager.id, campaign_id=campaign.id
    )
