"""
Запуск админ-панели магазина.

Использование:
    python run_admin.py

Без ADMIN_JWT_SECRET сервер не запускается.
"""

import sys

import uvicorn

from store_admin.config import admin_settings


def main() -> int:
    if not admin_settings.ADMIN_JWT_SECRET.strip():
        print("❌ ADMIN_JWT_SECRET не задан: укажите секрет подписи токенов в .env")
        return 1

    uvicorn.run(
        "store_admin.main:app",
        host=admin_settings.ADMIN_HOST,
        port=admin_settings.ADMIN_PORT,
        reload=admin_settings.DEBUG,
        log_level=admin_settings.ADMIN_LOG_LEVEL.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
