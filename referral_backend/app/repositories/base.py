"""
Storage contracts for the referral service.

The service only talks to these abstract stores; any backend that can
create, fetch by key and update rows satisfies them. Writes are staged and
become durable on ``commit``, so the caller decides the transaction boundary.
"""
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from referral_backend.app.core.exceptions import ConflictError, PersistenceError
from referral_backend.app.core.logging import get_logger
from referral_backend.app.models.referral import Referral
from referral_backend.app.models.user import User

logger = get_logger(__name__)


class Store(ABC):
    """Transaction control shared by all stores."""

    @abstractmethod
    async def commit(self) -> None:
        """Make staged writes durable."""

    @abstractmethod
    async def rollback(self) -> None:
        """Discard staged writes."""


class UserStore(Store):
    """Key-based persistence for users. Lookups never return soft-deleted rows."""

    @abstractmethod
    async def create(self, user: User) -> User:
        ...

    @abstractmethod
    async def get_by_id(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    async def get_by_referral_code(self, code: str) -> Optional[User]:
        ...

    @abstractmethod
    async def update(self, user: User) -> User:
        ...

    @abstractmethod
    async def soft_delete(self, user: User) -> User:
        ...


class ReferralStore(Store):
    """Persistence for referrer -> referred edges. No update path."""

    @abstractmethod
    async def create(self, referral: Referral) -> Referral:
        ...

    @abstractmethod
    async def get_by_referrer_id(self, referrer_id: int) -> Sequence[Referral]:
        ...


class SqlAlchemyStore(Store):
    """
    Mixin for stores backed by a request-scoped AsyncSession.

    Stores built on the same session share one transaction: committing
    through any of them commits all staged writes.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _flush(self) -> None:
        try:
            await self.session.flush()
        except IntegrityError as e:
            logger.warning("Store constraint violated", error=str(e.orig))
            raise ConflictError() from e
        except SQLAlchemyError as e:
            logger.error("Store flush failed", error=str(e))
            raise PersistenceError(str(e)) from e

    async def _scalar(self, stmt):
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Store query failed", error=str(e))
            raise PersistenceError(str(e)) from e
        return result.scalar_one_or_none()

    async def _scalars(self, stmt) -> list:
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Store query failed", error=str(e))
            raise PersistenceError(str(e)) from e
        return list(result.scalars().all())

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except IntegrityError as e:
            logger.warning("Store constraint violated on commit", error=str(e.orig))
            raise ConflictError() from e
        except SQLAlchemyError as e:
            logger.error("Store commit failed", error=str(e))
            raise PersistenceError(str(e)) from e

    async def rollback(self) -> None:
        await self.session.rollback()
