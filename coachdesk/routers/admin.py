import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import List, Optional
from coachdesk.database import get_db
from coachdesk.core.auth import get_current_admin, ensure_allowed
from coachdesk.core.policy import Action
from coachdesk.models.user import User, Role, MANAGER_ROLES
from coachdesk.models.campaign import Campaign, Kpi
from coachdesk.schemas.user import UserCreate, UserUpdate, UserResponse, ManagerOption
from coachdesk.schemas.campaign import (
    CampaignCreate, CampaignResponse, KpiCreate, KpiResponse,
    CampaignKpiToggle, CampaignKpiStatus
)
from coachdesk.services import kpi_catalog
from coachdesk.utils.password import hash_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


async def _check_manager(db: AsyncSession, manager_id: Optional[int], user_id: Optional[int] = None):
    if manager_id is None:
        raise HTTPException(400, "Please select a manager for the agent.")
    if manager_id == user_id:
        raise HTTPException(400, "An agent cannot be their own manager.")
    result = await db.execute(select(User).where(User.id == manager_id))
    manager = result.scalar_one_or_none()
    if not manager or manager.role not in MANAGER_ROLES:
        raise HTTPException(400, "Manager not found or not eligible to manage agents")


async def _check_no_reports(db: AsyncSession, manager_id: int):
    # Agents must never point at someone who can no longer manage them
    result = await db.execute(
        select(func.count(User.id))
        .where(User.manager_id == manager_id)
        .where(User.role == Role.AGENT.value)
    )
    reports = result.scalar_one()
    if reports:
        raise HTTPException(
            400, f"Reassign this manager's {reports} agent(s) before demoting or deactivating them."
        )


async def _check_campaign(db: AsyncSession, campaign_id: Optional[int]):
    if campaign_id is None:
        return
    if not await db.get(Campaign, campaign_id):
        raise HTTPException(400, "Campaign not found")


async def _get_campaign_or_404(db: AsyncSession, campaign_id: int) -> Campaign:
    campaign = await db.get(Campaign, campaign_id)
    if not campaign:
        raise HTTPException(404, "Campaign not found")
    return campaign


# ---- Users ----

@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_in: UserCreate,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    ensure_allowed(admin, Action.MANAGE_USER, User(role=user_in.role.value))

    existing = await db.execute(select(User).where(User.email == user_in.email))
    if existing.scalar_one_or_none():
        raise HTTPException(400, "This email is already registered.")

    is_agent = user_in.role == Role.AGENT
    if is_agent:
        await _check_manager(db, user_in.manager_id)
    await _check_campaign(db, user_in.campaign_id)

    try:
        hashed_pw = hash_password(user_in.password)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    user = User(
        email=user_in.email,
        full_name=user_in.full_name,
        hashed_password=hashed_pw,
        role=user_in.role.value,
        manager_id=user_in.manager_id if is_agent else None,
        campaign_id=user_in.campaign_id,
        is_active=True
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Admin %s created user %s (%s)", admin.id, user.id, user.role)
    return user


@router.get("/users", response_model=List[UserResponse])
async def list_users(
    role: Optional[Role] = None,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    query = select(User).order_by(User.full_name, User.id)
    if role:
        query = query.where(User.role == role.value)
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/managers", response_model=List[ManagerOption])
async def list_managers(
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    # Everyone who may appear as an agent's manager
    result = await db.execute(
        select(User)
        .where(User.role.in_(MANAGER_ROLES))
        .where(User.is_active.is_(True))
        .order_by(User.full_name)
    )
    return result.scalars().all()


@router.patch("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    update_in: UserUpdate,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(404, "User not found")

    ensure_allowed(admin, Action.MANAGE_USER, user)
    fields = update_in.model_fields_set

    role = update_in.role.value if update_in.role else user.role
    if role != user.role:
        ensure_allowed(admin, Action.MANAGE_USER, User(role=role))

    losing_team = role not in MANAGER_ROLES or update_in.is_active is False
    if user.role in MANAGER_ROLES and losing_team:
        await _check_no_reports(db, user.id)

    if role == Role.AGENT.value:
        manager_id = update_in.manager_id if "manager_id" in fields else user.manager_id
        await _check_manager(db, manager_id, user.id)
    else:
        manager_id = None

    if "campaign_id" in fields:
        await _check_campaign(db, update_in.campaign_id)
        user.campaign_id = update_in.campaign_id

    if update_in.is_active is not None:
        if user.id == admin.id and not update_in.is_active:
            raise HTTPException(400, "You cannot deactivate your own account")
        user.is_active = update_in.is_active

    user.role = role
    user.manager_id = manager_id
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Admin %s updated user %s", admin.id, user.id)
    return user


# ---- Campaigns & KPIs ----

@router.post("/campaigns", response_model=CampaignResponse, status_code=status.HTTP_201_CREATED)
async def create_campaign(
    campaign_in: CampaignCreate,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    existing = await db.execute(select(Campaign).where(Campaign.name == campaign_in.name))
    if existing.scalar_one_or_none():
        raise HTTPException(400, "A campaign with this name already exists")

    campaign = Campaign(name=campaign_in.name, description=campaign_in.description)
    db.add(campaign)
    await db.commit()
    await db.refresh(campaign)
    return campaign


@router.get("/campaigns", response_model=List[CampaignResponse])
async def list_campaigns(
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    result = await db.execute(select(Campaign).order_by(Campaign.name))
    return result.scalars().all()


@router.post("/kpis", response_model=KpiResponse, status_code=status.HTTP_201_CREATED)
async def create_kpi(
    kpi_in: KpiCreate,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    existing = await db.execute(select(Kpi).where(Kpi.name == kpi_in.name))
    if existing.scalar_one_or_none():
        raise HTTPException(400, "A KPI with this name already exists")

    kpi = Kpi(name=kpi_in.name, kpi_type=kpi_in.kpi_type.value)
    db.add(kpi)
    await db.commit()
    await db.refresh(kpi)
    return kpi


@router.get("/kpis", response_model=List[KpiResponse])
async def list_kpis(
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    result = await db.execute(select(Kpi).order_by(Kpi.name))
    return result.scalars().all()


@router.put("/campaigns/{campaign_id}/kpis/{kpi_id}", response_model=CampaignKpiStatus)
async def toggle_campaign_kpi(
    campaign_id: int,
    kpi_id: int,
    toggle: CampaignKpiToggle,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    await _get_campaign_or_404(db, campaign_id)
    kpi = await db.get(Kpi, kpi_id)
    if not kpi:
        raise HTTPException(404, "KPI not found")

    link = await kpi_catalog.set_enablement(db, campaign_id, kpi_id, toggle.enabled)
    return CampaignKpiStatus(
        kpi_id=kpi.id, name=kpi.name, kpi_type=kpi.kpi_type, enabled=link.enabled
    )


@router.get("/campaigns/{campaign_id}/kpis", response_model=List[CampaignKpiStatus])
async def list_campaign_kpis(
    campaign_id: int,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    await _get_campaign_or_404(db, campaign_id)
    links = await kpi_catalog.list_enablements(db, campaign_id)
    enabled = {link.kpi_id: link.enabled for link in links}

    result = await db.execute(select(Kpi).order_by(Kpi.name))
    return [
        CampaignKpiStatus(
            kpi_id=kpi.id,
            name=kpi.name,
            kpi_type=kpi.kpi_type,
            enabled=enabled.get(kpi.id, False)
        )
        for kpi in result.scalars()
    ]
