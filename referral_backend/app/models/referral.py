from sqlalchemy import ForeignKey, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from typing import Optional
from referral_backend.app.core.base import Base, utc_now


class Referral(Base):
    """Edge "referred_by invited referred_id". Written once, never updated."""
    __tablename__ = 'referrals'

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Кого пригласили (Новый пользователь)
    referred_id: Mapped[int] = mapped_column(ForeignKey('users.id'))

    # Кто пригласил
    referred_by: Mapped[int] = mapped_column(ForeignKey('users.id'))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index('ix_referrals_referred_by', 'referred_by'),
        Index('ix_referrals_deleted_at', 'deleted_at'),
    )
