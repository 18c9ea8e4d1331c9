# coachdesk/models/coaching.py
from sqlalchemy import Column, Integer, String, Text, Float, DateTime, ForeignKey
from coachdesk.database import Base

# Both tables are append-only: rows are never updated or deleted.

class CoachingLog(Base):
    __tablename__ = "coaching_logs"

    id = Column(Integer, primary_key=True, index=True)
    agent_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    coach_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    coach_name = Column(String, nullable=False)
    campaign_id = Column(Integer, ForeignKey("campaigns.id"), nullable=False)
    action_plan = Column(Text, nullable=False)
    overall_rating = Column(Float, nullable=False)  # 1.00–5.00
    idempotency_key = Column(String(128), unique=True, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)

class AgentScore(Base):
    __tablename__ = "agent_scores"

    id = Column(Integer, primary_key=True, index=True)
    coaching_log_id = Column(Integer, ForeignKey("coaching_logs.id"), nullable=False, index=True)
    agent_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    kpi_id = Column(Integer, ForeignKey("kpis.id"), nullable=False)
    campaign_id = Column(Integer, ForeignKey("campaigns.id"), nullable=False)
    score = Column(Float, nullable=False)
    target = Column(Float, nullable=False, default=0.0)
    weight = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), nullable=False)
