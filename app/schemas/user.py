"""User Pydantic schemas — registration, login, profile output."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr

from app.models.idea import IdeaStatus
from app.models.user import UserRole


class UserCreate(BaseModel):
    """Fields submitted on the registration form."""
    email: EmailStr
    password: str
    first_name: str
    last_name: str
    employee_id: Optional[str] = None
    department: Optional[str] = None


class UserLogin(BaseModel):
    """Fields submitted on the login form."""
    email: EmailStr
    password: str


class UserOut(BaseModel):
    """Public user representation returned by the API."""
    id: int
    email: str
    first_name: str
    last_name: str
    role: UserRole
    employee_id: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    skills: List[str] = []
    avatar_url: Optional[str] = None
    email_verified: bool = False
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    skills: Optional[List[str]] = None
    avatar_url: Optional[str] = None


class AuthResponse(BaseModel):
    user: UserOut
    access_token: str
    token_type: str = "bearer"


class OTPRequest(BaseModel):
    email: EmailStr


class OTPVerify(BaseModel):
    email: EmailStr
    otp: str


class ForgotPassword(BaseModel):
    email: EmailStr


class ResetPassword(BaseModel):
    token: str
    password: str


class RoleUpdate(BaseModel):
    role: Optional[str] = None


class LatestIdea(BaseModel):
    id: int
    title: str
    status: IdeaStatus
    progress: int
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AdminUserOut(UserOut):
    """User row on the admin participants screen."""
    ideas_count: int = 0
    latest_idea: Optional[LatestIdea] = None
