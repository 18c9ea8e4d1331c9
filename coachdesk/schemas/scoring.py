from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional

class KpiScoreInput(BaseModel):
    kpi_id: int
    raw_score: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    target: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    weight: float = Field(0, ge=0, le=100, allow_inf_nan=False)  # percent

class ScorePreviewRequest(BaseModel):
    scores: List[KpiScoreInput] = Field(..., min_length=1)

class ScorePreviewResponse(BaseModel):
    overall_rating: Optional[float]  # None → no KPI has a weight yet

class ScoreSubmission(ScorePreviewRequest):
    action_plan: Optional[str] = None
    idempotency_key: Optional[str] = Field(None, min_length=1, max_length=128)

class AgentScoreResponse(BaseModel):
    id: int
    coaching_log_id: int
    agent_id: int
    kpi_id: int
    kpi_name: Optional[str] = None
    campaign_id: int
    score: float
    target: float
    weight: float
    created_at: datetime

    model_config = {"from_attributes": True}

class CoachingLogResponse(BaseModel):
    id: int
    agent_id: int
    coach_id: int
    coach_name: str
    campaign_id: int
    action_plan: str
    overall_rating: float
    created_at: datetime
    scores: List[AgentScoreResponse] = []

    model_config = {"from_attributes": True}

class SubmissionResponse(BaseModel):
    message: str
    overall_rating: float
    duplicate: bool = False  # True → idempotency key matched an earlier submission
    coaching_log: CoachingLogResponse
