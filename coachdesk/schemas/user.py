from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from coachdesk.models.user import Role

class UserCreate(BaseModel):
    email: EmailStr
    full_name: str = Field(..., min_length=2, max_length=100)
    password: str = Field(..., min_length=8, max_length=72)
    role: Role = Role.AGENT
    manager_id: Optional[int] = None   # required for agents
    campaign_id: Optional[int] = None

class UserUpdate(BaseModel):
    role: Optional[Role] = None
    manager_id: Optional[int] = None
    campaign_id: Optional[int] = None
    is_active: Optional[bool] = None

class UserResponse(BaseModel):
    id: int
    email: EmailStr
    full_name: Optional[str]
    role: str
    manager_id: Optional[int]
    campaign_id: Optional[int]
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class ManagerOption(BaseModel):
    id: int
    full_name: Optional[str]
    role: str

    model_config = {"from_attributes": True}

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class RefreshRequest(BaseModel):
    refresh_token: str

class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=8, max_length=72)

class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str
    user: UserResponse
