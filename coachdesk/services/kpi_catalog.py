# coachdesk/services/kpi_catalog.py
import logging
from typing import Iterable, List, Optional
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from coachdesk.models.campaign import Kpi, CampaignKpi
from coachdesk.services.errors import CatalogUnavailableError

logger = logging.getLogger(__name__)


async def list_enablements(db: AsyncSession, campaign_id: int) -> List[CampaignKpi]:
    result = await db.execute(
        select(CampaignKpi).where(CampaignKpi.campaign_id == campaign_id)
    )
    return list(result.scalars().all())


async def get_kpis_by_ids(db: AsyncSession, kpi_ids: Iterable[int]) -> List[Kpi]:
    ids = set(kpi_ids)
    if not ids:
        return []
    result = await db.execute(
        select(Kpi).where(Kpi.id.in_(ids)).order_by(Kpi.name)
    )
    return list(result.scalars().all())


async def get_enabled_kpis(db: AsyncSession, campaign_id: Optional[int]) -> List[Kpi]:
    """KPI definitions enabled for a campaign, ordered by name.

    Raises CatalogUnavailableError when the agent has no campaign, nothing is
    enabled, or the lookup itself fails.
    """
    if campaign_id is None:
        raise CatalogUnavailableError("Agent is not assigned to a campaign.")

    try:
        links = await list_enablements(db, campaign_id)
        kpis = await get_kpis_by_ids(db, [link.kpi_id for link in links if link.enabled])
    except SQLAlchemyError as e:
        logger.error("KPI catalog lookup failed for campaign %s: %s", campaign_id, e)
        raise CatalogUnavailableError(f"Could not load KPIs for this campaign: {e}") from e

    if not kpis:
        raise CatalogUnavailableError("No KPIs are enabled for this agent's campaign.")
    return kpis


async def set_enablement(db: AsyncSession, campaign_id: int, kpi_id: int, enabled: bool) -> CampaignKpi:
    """Create the (campaign, KPI) link or flip its flag; one row per pair."""
    result = await db.execute(
        select(CampaignKpi)
        .where(CampaignKpi.campaign_id == campaign_id)
        .where(CampaignKpi.kpi_id == kpi_id)
    )
    link = result.scalar_one_or_none()
    if link is None:
        link = CampaignKpi(campaign_id=campaign_id, kpi_id=kpi_id, enabled=enabled)
    else:
        link.enabled = enabled
    db.add(link)
    await db.commit()
    await db.refresh(link)
    return link
