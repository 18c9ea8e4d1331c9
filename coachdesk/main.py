# coachdesk/main.py
import logging
from fastapi import FastAPI
from sqlalchemy import select
from sqlalchemy import exc as sa_exc
from coachdesk.config import settings
from coachdesk.database import engine, AsyncSessionLocal, Base
from coachdesk.models.user import User, Role
from coachdesk.models.campaign import Campaign, Kpi, CampaignKpi
from coachdesk.models.coaching import CoachingLog, AgentScore
from coachdesk.routers import auth, admin, manager, agent
from coachdesk.utils.password import hash_password

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(title="CoachDesk - Call Center Coaching & KPI Tracking", version="1.0")

# Include Routers
app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(manager.router)
app.include_router(agent.router)


async def bootstrap_super_admin():
    if not settings.BOOTSTRAP_ADMIN_EMAIL or not settings.BOOTSTRAP_ADMIN_PASSWORD:
        return
    async with AsyncSessionLocal() as db:
        result = await db.execute(select(User).where(User.email == settings.BOOTSTRAP_ADMIN_EMAIL))
        if result.scalar_one_or_none():
            return
        db.add(User(
            email=settings.BOOTSTRAP_ADMIN_EMAIL,
            full_name=settings.BOOTSTRAP_ADMIN_NAME,
            hashed_password=hash_password(settings.BOOTSTRAP_ADMIN_PASSWORD),
            role=Role.SUPER_ADMIN.value,
            is_active=True,
        ))
        await db.commit()
        logger.info("Created bootstrap Super Admin %s", settings.BOOTSTRAP_ADMIN_EMAIL)


# Create DB Tables (for demo only, use Alembic in prod)
@app.on_event("startup")
async def startup_event():
    # create tables (async). ignore duplicate-object errors from previous partial runs.
    async with engine.begin() as conn:
        try:
            await conn.run_sync(Base.metadata.create_all)
        except sa_exc.IntegrityError as e:
            msg = str(getattr(e, "orig", e))
            if "duplicate key value violates unique constraint" in msg or "already exists" in msg:
                logger.warning("Ignored duplicate DDL error during create_all: %s", msg)
            else:
                raise
    await bootstrap_super_admin()

@app.get("/")
def read_root():
    return {"message": "Welcome to CoachDesk"}

@app.get("/health")
def health_check():
    return {"status": "healthy", "service": "coachdesk", "version": app.version}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("coachdesk.main:app", host="0.0.0.0", port=8000, reload=True)
