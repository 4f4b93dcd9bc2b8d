"""
Drop and recreate the referral tables (development only).
Использование: python3 reset_db.py
"""
import asyncio

from sqlalchemy import text

from referral_backend.app.core.base import Base
from referral_backend.app.core.database import create_engine_from_settings
from referral_backend.app.core.settings import load_settings
from referral_backend.app.models import referral, user  # noqa: F401


async def reset_database():
    settings = load_settings()
    if settings.is_production:
        raise SystemExit("❌ Refusing to reset a production database")

    engine = create_engine_from_settings(settings)
    print(f"🔄 Сбрасываю базу {settings.DB_NAME} на {settings.DB_HOST}...")
    async with engine.begin() as conn:
        # referrals ссылается на users, поэтому CASCADE
        for table in ("referrals", "users", "alembic_version"):
            await conn.execute(text(f"DROP TABLE IF EXISTS {table} CASCADE;"))
        print("🗑 Таблицы удалены.")

        await conn.run_sync(Base.metadata.create_all)
        print("🏗 Новая структура создана.")
    await engine.dispose()
    print("✅ База данных готова!")


if __name__ == "__main__":
    asyncio.run(reset_database())
