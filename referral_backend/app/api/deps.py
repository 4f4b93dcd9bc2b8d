from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from referral_backend.app.core.auth import TokenIssuer, get_token_issuer
from referral_backend.app.repositories import SqlReferralStore, SqlUserStore
from referral_backend.app.services.referrals import ReferralService


# Эта функция выдает сессию базы данных для каждого запроса
async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async with request.app.state.session_factory() as session:
        yield session


# Сервис собирается на каждый запрос поверх одной сессии: оба хранилища в одной транзакции
async def get_referral_service(
    session: AsyncSession = Depends(get_session),
    tokens: TokenIssuer = Depends(get_token_issuer),
) -> ReferralService:
    return ReferralService(
        users=SqlUserStore(session),
        referrals=SqlReferralStore(session),
        tokens=tokens,
    )
