# -*- coding: utf-8 -*-
"""
Доставка кодов подтверждения через Telegram-бота.

Сообщение отправляется в чат администратора (TELEGRAM_CHAT_ID)
через aiogram Bot.send_message.
"""

import logging
from typing import Optional, Protocol

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError
from aiogram.utils.token import TokenValidationError

from store_admin.auth.exceptions import DeliveryError

logger = logging.getLogger("store_admin.auth.telegram")


CODE_MESSAGE_TEMPLATE = (
    "🔐 <b>Код подтверждения входа</b>\n\n"
    "<b>{app_name}</b>\n\n"
    "Ваш код для завершения входа в систему:\n\n"
    "<code>{code}</code>\n\n"
    "📋 <i>Нажмите на код для копирования</i>\n\n"
    "⏰ Код действителен: <b>{ttl_minutes} минут</b>\n"
    "🔒 Никому не сообщайте этот код\n\n"
    "⚠️ <b>Если это не вы</b>, проигнорируйте это сообщение и смените пароль администратора."
)


def render_code_message(code: str, app_name: str = "Store Admin", ttl_minutes: int = 5) -> str:
    return CODE_MESSAGE_TEMPLATE.format(app_name=app_name, code=code, ttl_minutes=ttl_minutes)


class CodeSender(Protocol):
    """Канал доставки одноразового кода."""

    async def send_code(self, code: str) -> None:
        ...


class TelegramCodeSender:
    """Отправляет код в Telegram-чат администратора."""

    def __init__(
        self,
        bot_token: Optional[str],
        chat_id: Optional[str],
        app_name: str = "Store Admin",
        ttl_minutes: int = 5,
    ):
        self.bot_token = (bot_token or "").strip()
        self.chat_id = (chat_id or "").strip()
        self.app_name = app_name
        self.ttl_minutes = ttl_minutes

    def _create_bot(self) -> Bot:
        return Bot(token=self.bot_token)

    async def send_code(self, code: str) -> None:
        """
        Отправляет код администратору.

        Raises:
            DeliveryError: Telegram не настроен или недоступен
        """
        if not self.bot_token or not self.chat_id:
            logger.error("Telegram не настроен: отсутствует токен бота или ID чата")
            raise DeliveryError("Telegram не настроен")

        text = render_code_message(code, self.app_name, self.ttl_minutes)

        try:
            bot = self._create_bot()
        except TokenValidationError as e:
            logger.error(f"Некорректный токен Telegram-бота: {e}")
            raise DeliveryError("Telegram не настроен")

        try:
            await bot.send_message(chat_id=self.chat_id, text=text, parse_mode="HTML")
        except TelegramAPIError as e:
            logger.error(f"Ошибка отправки сообщения в Telegram: {e}")
            raise DeliveryError()
        except OSError as e:
            logger.error(f"Telegram недоступен: {e}")
            raise DeliveryError()
        finally:
            await bot.session.close()

        logger.info(f"Код подтверждения отправлен в Telegram (chat_id={self.chat_id})")
