# -*- coding: utf-8 -*-
"""
Ошибки двухэтапной аутентификации.

Каждая ошибка несёт HTTP-статус и сообщение для клиента; на границе
эндпоинтов они превращаются в JSON-ответ {"message": ...}.
"""

from typing import Optional


class AdminAuthError(Exception):
    """Базовая ошибка аутентификации админ-панели."""

    status_code: int = 500
    default_message: str = "Внутренняя ошибка сервера"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ConfigurationError(AdminAuthError):
    """Не заданы обязательные настройки (учётные данные, секрет, Telegram)."""

    status_code = 500
    default_message = "Ошибка конфигурации админ-доступа"


class InvalidCredentials(AdminAuthError):
    """Неверный логин или пароль (без уточнения, что именно)."""

    status_code = 401
    default_message = "Неверный логин или пароль"


class InvalidToken(AdminAuthError):
    """Токен отсутствует, подделан или истёк."""

    status_code = 401
    default_message = "Недействительный токен"


class InvalidStage(AdminAuthError):
    """Токен валиден, но выдан для другого этапа аутентификации."""

    status_code = 400
    default_message = "Неверный этап аутентификации"


class DeliveryError(AdminAuthError):
    """Не удалось доставить код через Telegram."""

    status_code = 500
    default_message = "Ошибка отправки кода в Telegram"


class InvalidSessionToken(InvalidToken):
    """Недействителен сессионный токен (cookie admin_token удаляется)."""


class InvalidRequest(AdminAuthError):
    """Тело запроса не соответствует ожидаемому формату."""

    status_code = 400
    default_message = "Некорректные данные запроса"
