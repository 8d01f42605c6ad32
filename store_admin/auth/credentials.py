# -*- coding: utf-8 -*-
"""
Проверка логина и пароля администратора.

Учётные данные читаются из таблицы settings (ключи admin_login,
admin_password); если записей нет, используются значения из окружения.
"""

import logging
import secrets
from typing import Optional

from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from store_admin.auth.exceptions import ConfigurationError, InvalidCredentials
from store_admin.config import AdminSettings
from store_admin.db import Setting

logger = logging.getLogger("store_admin.auth.credentials")

# Ключи в таблице settings
ADMIN_LOGIN_KEY = "admin_login"
ADMIN_PASSWORD_KEY = "admin_password"
TELEGRAM_BOT_TOKEN_KEY = "TELEGRAM_BOT_TOKEN"
TELEGRAM_CHAT_ID_KEY = "TELEGRAM_CHAT_ID"

# PBKDF2-SHA256: не требует бинарного пакета bcrypt
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__default_rounds=310_000,
)


def hash_password(password: str) -> str:
    """Хэширует пароль."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Проверяет соответствие пароля хэшу.

    Returns:
        True если пароль верный, False иначе (в том числе для нечитаемого хэша)
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


class AdminConfigRepository:
    """Чтение настроек админ-доступа из БД с запасным вариантом из окружения."""

    def __init__(self, db: AsyncSession, settings: AdminSettings):
        self.db = db
        self.settings = settings

    async def get_value(self, key: str) -> Optional[str]:
        result = await self.db.execute(select(Setting.value).where(Setting.key == key))
        value = result.scalar_one_or_none()
        if value is None or not value.strip():
            return None
        return value.strip()

    async def set_value(self, key: str, value: str) -> None:
        setting = await self.db.get(Setting, key)
        if setting is None:
            self.db.add(Setting(key=key, value=value))
        else:
            setting.value = value
        await self.db.flush()

    async def get_admin_credentials(self) -> tuple[Optional[str], Optional[str]]:
        """Возвращает (login, password_hash)."""
        login = await self.get_value(ADMIN_LOGIN_KEY) or self.settings.ADMIN_LOGIN.strip() or None
        password_hash = (
            await self.get_value(ADMIN_PASSWORD_KEY)
            or self.settings.ADMIN_PASSWORD_HASH.strip()
            or None
        )
        return login, password_hash

    async def get_telegram_settings(self) -> tuple[Optional[str], Optional[str]]:
        """Возвращает (bot_token, chat_id)."""
        bot_token = (
            await self.get_value(TELEGRAM_BOT_TOKEN_KEY)
            or self.settings.TELEGRAM_BOT_TOKEN.strip()
            or None
        )
        chat_id = await self.get_value(TELEGRAM_CHAT_ID_KEY) or self.settings.telegram_chat_id
        return bot_token, chat_id


class CredentialVerifier:
    """Первый этап входа: проверка логина и пароля."""

    def __init__(self, config: AdminConfigRepository):
        self.config = config

    async def verify(self, login: str, password: str) -> str:
        """
        Проверяет логин и пароль.

        Ошибка одинакова для неверного логина и неверного пароля.
        Хэш пароля проверяется в любом случае, чтобы время ответа
        не выдавало, какое поле неверно.

        Returns:
            Логин администратора

        Raises:
            ConfigurationError: учётные данные не настроены
            InvalidCredentials: логин или пароль неверны
        """
        stored_login, password_hash = await self.config.get_admin_credentials()
        if not stored_login or not password_hash:
            logger.error("Учётные данные администратора не настроены")
            raise ConfigurationError()

        login_ok = secrets.compare_digest(login.encode("utf-8"), stored_login.encode("utf-8"))
        password_ok = verify_password(password, password_hash)

        if not (login_ok and password_ok):
            logger.warning(f"Неудачная попытка входа: {login}")
            raise InvalidCredentials()

        return stored_login
