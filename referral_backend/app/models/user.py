from sqlalchemy import String, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from typing import Optional
from referral_backend.app.core.base import Base, utc_now


class User(Base):
    __tablename__ = 'users'

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    # Never serialized outward
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Реферальный код: NULL = кода нет. Уникален среди всех пользователей
    referral_code: Mapped[Optional[str]] = mapped_column(String(64), unique=True, nullable=True)
    referral_expiry: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)  # Soft delete timestamp

    __table_args__ = (
        Index('ix_users_deleted_at', 'deleted_at'),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"
