"""Storage layer: abstract stores and their SQLAlchemy implementations."""

from referral_backend.app.repositories.base import (
    ReferralStore,
    SqlAlchemyStore,
    Store,
    UserStore,
)
from referral_backend.app.repositories.referrals import SqlReferralStore
from referral_backend.app.repositories.users import SqlUserStore

__all__ = [
    "Store",
    "UserStore",
    "ReferralStore",
    "SqlAlchemyStore",
    "SqlUserStore",
    "SqlReferralStore",
]
