# -*- coding: utf-8 -*-
"""
Утилиты безопасности для админ-панели.

Содержит функции для:
- Маскировки чувствительных данных в логах
- Разбора заголовка Authorization
"""

from typing import Optional


def mask_sensitive_data(data: str, visible_chars: int = 4) -> str:
    """
    Маскирует чувствительные данные для логирования.

    Args:
        data: Данные для маскировки
        visible_chars: Количество видимых символов в начале и конце

    Returns:
        Замаскированная строка
    """
    if not data or len(data) <= visible_chars * 2:
        return "*" * len(data) if data else ""

    return f"{data[:visible_chars]}{'*' * (len(data) - visible_chars * 2)}{data[-visible_chars:]}"


def parse_bearer_token(header_value: Optional[str]) -> Optional[str]:
    """
    Извлекает токен из заголовка вида "Bearer <token>".

    Returns:
        Токен или None, если заголовок отсутствует или имеет другую схему
    """
    if not header_value:
        return None

    scheme, _, token = header_value.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None

    token = token.strip()
    return token or None
