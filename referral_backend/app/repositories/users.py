from typing import Optional

from sqlalchemy import select

from referral_backend.app.core.base import utc_now
from referral_backend.app.models.user import User
from referral_backend.app.repositories.base import SqlAlchemyStore, UserStore


class SqlUserStore(SqlAlchemyStore, UserStore):
    """UserStore over SQLAlchemy."""

    def _live(self):
        return select(User).where(User.deleted_at.is_(None))

    async def create(self, user: User) -> User:
        self.session.add(user)
        await self._flush()
        return user

    async def get_by_id(self, user_id: int) -> Optional[User]:
        return await self._scalar(self._live().where(User.id == user_id))

    async def get_by_email(self, email: str) -> Optional[User]:
        return await self._scalar(self._live().where(User.email == email))

    async def get_by_referral_code(self, code: str) -> Optional[User]:
        if not code:
            return None
        return await self._scalar(self._live().where(User.referral_code == code))

    async def update(self, user: User) -> User:
        user.updated_at = utc_now()
        self.session.add(user)
        await self._flush()
        return user

    async def soft_delete(self, user: User) -> User:
        user.deleted_at = utc_now()
        self.session.add(user)
        await self._flush()
        return user
