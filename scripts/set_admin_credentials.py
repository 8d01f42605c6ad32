"""
Скрипт для настройки доступа в админ-панель.

Записывает в таблицу settings логин и хэш пароля администратора,
а также (по желанию) токен Telegram-бота и ID чата для кодов подтверждения.

Использование:
    python scripts/set_admin_credentials.py
"""

import asyncio
import getpass
import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from store_admin.auth.credentials import (
    ADMIN_LOGIN_KEY,
    ADMIN_PASSWORD_KEY,
    TELEGRAM_BOT_TOKEN_KEY,
    TELEGRAM_CHAT_ID_KEY,
    AdminConfigRepository,
    hash_password,
)
from store_admin.config import admin_settings
from store_admin.database import build_engine, build_session_factory, close_db, init_db


async def set_admin_credentials():
    """Сохраняет учётные данные администратора в БД."""
    print("=" * 60)
    print("Настройка доступа в админ-панель")
    print("=" * 60)
    print("\n💡 Важно:")
    print("   - Вход двухэтапный: пароль + код из Telegram")
    print("   - Код приходит в чат TELEGRAM_CHAT_ID от бота TELEGRAM_BOT_TOKEN")
    print("   - ID чата можно узнать через бота @userinfobot")
    print("=" * 60)

    login = input("\n👤 Введите логин администратора: ").strip()
    if not login:
        print("❌ Ошибка: Логин не может быть пустым")
        return

    password = getpass.getpass("🔑 Введите пароль (минимум 6 символов): ").strip()
    if len(password) < 6:
        print("❌ Ошибка: Пароль должен быть не менее 6 символов")
        return

    confirm_password = getpass.getpass("🔑 Подтвердите пароль: ").strip()
    if password != confirm_password:
        print("❌ Ошибка: Пароли не совпадают")
        return

    print("\n" + "-" * 60)
    print("📨 Telegram (Enter: оставить как есть)")
    print("-" * 60)
    bot_token = input("🤖 Токен бота: ").strip()
    chat_id = input("💬 ID чата администратора: ").strip()
    if chat_id and not chat_id.lstrip("-").isdigit():
        print("❌ Ошибка: ID чата должен быть числом (например: 123456789)")
        return

    engine = build_engine(admin_settings)
    try:
        await init_db(engine)
        session_factory = build_session_factory(engine)

        async with session_factory() as session:
            config = AdminConfigRepository(session, admin_settings)
            await config.set_value(ADMIN_LOGIN_KEY, login)
            await config.set_value(ADMIN_PASSWORD_KEY, hash_password(password))
            if bot_token:
                await config.set_value(TELEGRAM_BOT_TOKEN_KEY, bot_token)
            if chat_id:
                await config.set_value(TELEGRAM_CHAT_ID_KEY, chat_id)
            await session.commit()

            telegram_bot_token, telegram_chat_id = await config.get_telegram_settings()
    finally:
        await close_db(engine)

    print("\n" + "=" * 60)
    print("✅ Доступ настроен!")
    print("=" * 60)
    print(f"   Логин: {login}")
    print(f"   Telegram бот: {'✅ настроен' if telegram_bot_token else '❌ не настроен'}")
    print(f"   Telegram чат: {telegram_chat_id or '❌ не настроен'}")
    if not telegram_bot_token or not telegram_chat_id:
        print("\n⚠️  Без Telegram код подтверждения не будет доставлен и войти не получится.")
    print("\n💡 Теперь вы можете войти в админ-панель:")
    print(f"   http://localhost:{admin_settings.ADMIN_PORT}/admin/login")
    print("=" * 60)


if __name__ == "__main__":
    try:
        asyncio.run(set_admin_credentials())
    except KeyboardInterrupt:
        print("\n\n❌ Прервано пользователем")
    except Exception as e:
        print(f"\n❌ Ошибка: {e}")
        import traceback
        traceback.print_exc()
