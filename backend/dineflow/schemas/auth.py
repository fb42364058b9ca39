"""Authentication schemas."""

from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    """Owner sign-up with email and password."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    name: Optional[str] = Field(default=None, max_length=255)


class LoginRequest(BaseModel):
    """Login request body."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class FederatedLoginRequest(BaseModel):
    """ID token from the identity provider's popup sign-in."""

    id_token: str = Field(..., min_length=1)
    register_owner: bool = False


class UserProfile(BaseModel):
    id: int
    email: str
    name: str
    role: str
    status: str
    employee_id: Optional[str] = None
    business_id: Optional[int] = None
    pages: List[str]
    dashboard: str


class Token(BaseModel):
    """JWT token response."""

    access_token: str
    token_type: str = "bearer"
    user: UserProfile
