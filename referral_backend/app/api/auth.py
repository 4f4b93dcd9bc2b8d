"""
Public authentication endpoints: registration, login, registration by referral code.
"""
from fastapi import APIRouter, Depends, Request, status

from referral_backend.app.api.deps import get_referral_service
from referral_backend.app.core.limiter import AUTH_RATE_LIMIT, limiter
from referral_backend.app.schemas import (
    ErrorResponse,
    LoginRequest,
    RegisterRequest,
    RegisterWithReferralRequest,
    TokenResponse,
    UserEnvelope,
    UserResponse,
)
from referral_backend.app.services.referrals import ReferralService

router = APIRouter()


@router.post(
    "/register",
    response_model=UserEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
@limiter.limit(AUTH_RATE_LIMIT)
async def register(
    request: Request,
    data: RegisterRequest,
    service: ReferralService = Depends(get_referral_service),
):
    """Register a new user with email and password."""
    user = await service.register(data.email, data.password)
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse}},
)
@limiter.limit(AUTH_RATE_LIMIT)
async def login(
    request: Request,
    data: LoginRequest,
    service: ReferralService = Depends(get_referral_service),
):
    """Authenticate user and return JWT token."""
    token = await service.authenticate(data.email, data.password)
    return TokenResponse(token=token)


@router.post(
    "/register_with_referral",
    response_model=UserEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
@limiter.limit(AUTH_RATE_LIMIT)
async def register_with_referral(
    request: Request,
    data: RegisterWithReferralRequest,
    service: ReferralService = Depends(get_referral_service),
):
    """
    Register a new user using someone's referral code.

    The code is redeemable even after its expiry; only GET /referral_code
    enforces expiry.
    """
    user = await service.register_with_referral(data.referral_code, data.email, data.password)
    return UserEnvelope(user=UserResponse.model_validate(user))
