from typing import Sequence

from sqlalchemy import select

from referral_backend.app.models.referral import Referral
from referral_backend.app.repositories.base import ReferralStore, SqlAlchemyStore


class SqlReferralStore(SqlAlchemyStore, ReferralStore):
    """ReferralStore over SQLAlchemy."""

    async def create(self, referral: Referral) -> Referral:
        self.session.add(referral)
        await self._flush()
        return referral

    async def get_by_referrer_id(self, referrer_id: int) -> Sequence[Referral]:
        stmt = (
            select(Referral)
            .where(
                Referral.referred_by == referrer_id,
                Referral.deleted_at.is_(None),
            )
            .order_by(Referral.id)
        )
        return await self._scalars(stmt)
