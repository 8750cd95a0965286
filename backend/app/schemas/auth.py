"""
Storefront Backend - Auth Schemas
===================================

What:  Signup/login bodies and the token envelopes they return.

Emails are validated with EmailStr, which also normalizes them, so the
same address always encrypts to the same lookup key.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.schemas.common import Envelope

Role = Literal["user", "admin"]
Provider = Literal["local", "google", "facebook"]


class SignupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = Field(default=None, alias="confirmPassword")
    email: Optional[EmailStr] = None
    role: Role = "user"
    provider: Provider = "local"


class LoginRequest(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None


class SignupUserData(BaseModel):
    username: str
    email: str
    role: Role


class UserOut(BaseModel):
    """Public view of a stored user: email decrypted, password hash omitted."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    username: str
    email: str
    role: Role
    provider: Provider
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")


class SignupResponse(Envelope):
    token: str
    user_data: SignupUserData = Field(alias="userData")


class LoginResponse(Envelope):
    token: str
    user_data: UserOut = Field(alias="userData")
