"""Authentication-related Pydantic schemas."""
from typing import Optional

from pydantic import EmailStr

from hiring_platform.models.user import UserRole
from hiring_platform.schemas.common import CamelModel


class LoginRequest(CamelModel):
    """Development login: the user is created on first use with the requested role (admin only in debug mode)."""
    email: EmailStr
    name: Optional[str] = None
    role: UserRole = UserRole.APPLICANT
    company_name: Optional[str] = None


class UserResponse(CamelModel):
    id: str
    email: str
    name: Optional[str] = None
    role: UserRole
    company_id: Optional[str] = None


class AuthResponse(CamelModel):
    success: bool = True
    user: UserResponse
