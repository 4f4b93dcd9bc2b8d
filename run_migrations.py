#!/usr/bin/env python3
"""
Скрипт для выполнения миграций базы данных.
Использование: python3 run_migrations.py
"""
import subprocess
import sys
from pathlib import Path


def run_migrations():
    """Выполняет миграции Alembic (alembic upgrade head)"""
    backend_dir = Path(__file__).parent / "referral_backend"

    print("🔄 Выполняю миграции базы данных...")

    try:
        result = subprocess.run(
            ["alembic", "upgrade", "head"],
            cwd=backend_dir,
            check=True,
            capture_output=True,
            text=True
        )

        print("✅ Миграции успешно выполнены!")
        if result.stdout:
            print(result.stdout)

    except subprocess.CalledProcessError as e:
        print("❌ Ошибка при выполнении миграций:")
        if e.stderr:
            print(e.stderr)
        if e.stdout:
            print(e.stdout)
        sys.exit(1)
    except FileNotFoundError:
        print("❌ alembic не найден. Установите зависимости: pip install -e .")
        sys.exit(1)


if __name__ == "__main__":
    run_migrations()
