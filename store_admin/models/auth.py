# -*- coding: utf-8 -*-
"""
Pydantic схемы для двухэтапной аутентификации.
"""

from typing import Optional

from pydantic import BaseModel, Field


# ==================== Запросы ====================

class LoginRequest(BaseModel):
    """Первый этап: логин и пароль."""
    login: str = Field(..., max_length=255, description="Логин администратора")
    password: str = Field(..., max_length=255, description="Пароль")


class VerifyCodeRequest(BaseModel):
    """Второй этап: промежуточный токен и код из Telegram."""
    token: Optional[str] = Field(None, description="Промежуточный токен")
    code: Optional[str] = Field(None, max_length=32, description="Код подтверждения")


# ==================== Ответы ====================

class LoginResponse(BaseModel):
    success: bool = Field(True)
    token: str = Field(..., description="Промежуточный токен (pending_verification)")
    message: str = Field(..., description="Сообщение")


class StatusResponse(BaseModel):
    success: bool = Field(..., description="Успешно ли выполнена операция")
    message: str = Field(..., description="Сообщение для пользователя")


class SessionUser(BaseModel):
    login: str = Field(..., description="Логин администратора")
    timestamp: int = Field(..., description="Время выдачи токена (мс)")


class VerifyTokenResponse(BaseModel):
    success: bool = Field(True)
    message: str = Field(..., description="Сообщение")
    user: SessionUser
