# coachdesk/database.py
from typing import AsyncGenerator
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from coachdesk.config import settings

# Sync driver names people paste from hosting dashboards, mapped to their async drivers
ASYNC_DRIVERS = {
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "postgresql+psycopg2": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}


def async_database_url(url: str) -> str:
    parsed = make_url(url)
    driver = ASYNC_DRIVERS.get(parsed.drivername)
    if driver:
        parsed = parsed.set(drivername=driver)
    return parsed.render_as_string(hide_password=False)


def engine_options(url: str) -> dict:
    options = {"echo": settings.SQL_ECHO}
    if not make_url(url).drivername.startswith("sqlite"):
        # Drop connections the server closed while idle in the pool
        options["pool_pre_ping"] = True
    return options


db_url = async_database_url(settings.effective_database_url)
engine = create_async_engine(db_url, **engine_options(db_url))

AsyncSessionLocal = async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request; whatever the handler left uncommitted is rolled back."""
    async with AsyncSessionLocal() as session:
        yield session
