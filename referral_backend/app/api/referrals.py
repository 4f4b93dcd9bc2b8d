"""
Referral code endpoints.

GET /referral_code is public; everything else requires a Bearer token.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import EmailStr, TypeAdapter, ValidationError

from referral_backend.app.api.deps import get_referral_service
from referral_backend.app.core.auth import get_current_user_id
from referral_backend.app.core.base import as_utc
from referral_backend.app.schemas import (
    CreateReferralRequest,
    DeleteReferralResponse,
    ErrorResponse,
    ReferralCodeResponse,
    ReferralResponse,
    ReferralsResponse,
)
from referral_backend.app.services.referrals import ReferralService

router = APIRouter()

# Same normalisation EmailStr applies to request bodies (domain lowercased)
_email_adapter = TypeAdapter(EmailStr)


@router.get(
    "/referral_code",
    response_model=ReferralCodeResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_referral_code_by_email(
    email: Optional[str] = None,
    service: ReferralService = Depends(get_referral_service),
):
    """Retrieve a user's referral code using their email."""
    if not email:
        return JSONResponse(status_code=400, content={"error": "email is required"})
    try:
        email = _email_adapter.validate_python(email)
    except ValidationError:
        return JSONResponse(status_code=400, content={"error": "invalid email"})

    user = await service.get_referral_code_owner(email)
    return ReferralCodeResponse(
        referral_code=user.referral_code,
        expiry=as_utc(user.referral_expiry),
    )


@router.post(
    "/referral_code",
    response_model=ReferralCodeResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def create_referral_code(
    data: CreateReferralRequest,
    user_id: int = Depends(get_current_user_id),
    service: ReferralService = Depends(get_referral_service),
):
    """Create a new referral code with expiry date, replacing the old one."""
    user = await service.create_referral_code(user_id, data.expiry)
    return ReferralCodeResponse(
        referral_code=user.referral_code,
        expiry=as_utc(user.referral_expiry),
    )


@router.delete(
    "/referral_code",
    response_model=DeleteReferralResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def delete_referral_code(
    user_id: int = Depends(get_current_user_id),
    service: ReferralService = Depends(get_referral_service),
):
    """Delete the user's existing referral code."""
    user = await service.delete_referral_code(user_id)
    return DeleteReferralResponse(
        message="Referral code deleted",
        referral_code=user.referral_code,
    )


@router.get(
    "/referrals",
    response_model=ReferralsResponse,
    responses={500: {"model": ErrorResponse}},
)
async def get_referrals(
    user_id: int = Depends(get_current_user_id),
    service: ReferralService = Depends(get_referral_service),
):
    """List the users referred by the authenticated user."""
    referrals = await service.get_referrals(user_id)
    return ReferralsResponse(
        referrals=[ReferralResponse.model_validate(r) for r in referrals]
    )
