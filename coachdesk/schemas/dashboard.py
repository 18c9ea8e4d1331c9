from pydantic import BaseModel
from typing import Optional

class TeamMember(BaseModel):
    id: int
    full_name: Optional[str]
    email: str
    campaign_id: Optional[int]
    coaching_sessions: int
    latest_rating: Optional[float]
    average_rating: Optional[float]

class AgentDashboardResponse(BaseModel):
    full_name: Optional[str]
    email: str
    campaign_id: Optional[int]
    campaign_name: Optional[str]
    coaching_sessions: int
    latest_rating: Optional[float]
    average_rating: Optional[float]
