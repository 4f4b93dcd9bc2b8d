from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# --- Аутентификация ---
class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RegisterWithReferralRequest(BaseModel):
    referral_code: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)


class TokenResponse(BaseModel):
    token: str


# --- Пользователи ---
class UserResponse(BaseModel):
    """Public view of a user; password_hash is never part of it."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    referral_code: Optional[str] = None
    referral_expiry: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class UserEnvelope(BaseModel):
    user: UserResponse


# --- Реферальные коды ---
class CreateReferralRequest(BaseModel):
    expiry: datetime


class ReferralCodeResponse(BaseModel):
    referral_code: Optional[str] = None
    expiry: Optional[datetime] = None


class DeleteReferralResponse(BaseModel):
    message: str
    referral_code: Optional[str] = None


class ReferralResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    referred_id: int
    referred_by: int
    created_at: datetime
    updated_at: datetime


class ReferralsResponse(BaseModel):
    referrals: List[ReferralResponse]


class ErrorResponse(BaseModel):
    error: str
