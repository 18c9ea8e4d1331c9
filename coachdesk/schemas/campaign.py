from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional
from coachdesk.services.scoring import KpiType

class CampaignCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = None

class CampaignResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class KpiCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    kpi_type: KpiType

class KpiResponse(BaseModel):
    id: int
    name: str
    kpi_type: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class CampaignKpiToggle(BaseModel):
    enabled: bool

class CampaignKpiStatus(BaseModel):
    kpi_id: int
    name: str
    kpi_type: str
    enabled: bool

class ScoringFormResponse(BaseModel):
    agent_id: int
    agent_name: Optional[str]
    agent_email: str
    campaign_id: int
    kpis: List[KpiResponse]
