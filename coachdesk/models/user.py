# coachdesk/models/user.py
from enum import Enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, func
from coachdesk.database import Base


class Role(str, Enum):
    SUPER_ADMIN = "Super Admin"
    ADMIN = "Admin"
    MANAGER = "Manager"
    AGENT = "Agent"
    UNASSIGNED = "Unassigned"


ADMIN_ROLES = {Role.SUPER_ADMIN.value, Role.ADMIN.value}
# Roles that may appear as an agent's manager
MANAGER_ROLES = {Role.SUPER_ADMIN.value, Role.ADMIN.value, Role.MANAGER.value}


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=True)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, default=Role.UNASSIGNED.value)
    manager_id = Column(Integer, ForeignKey("users.id"), nullable=True)    # Agents only
    campaign_id = Column(Integer, ForeignKey("campaigns.id"), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
