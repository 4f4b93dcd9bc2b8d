# referral_backend/app/services/__init__.py
"""
Services layer for business logic.
Keeps API endpoints thin and business logic testable and reusable.
"""

from referral_backend.app.services.referrals import (
    ReferralService,
    generate_referral_code,
)

__all__ = [
    "ReferralService",
    "generate_referral_code",
]
